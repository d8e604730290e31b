"""
Punto de entrada del servicio de sincronizacion de asistencia.

Expone los endpoints de sync Sheets <-> datastore y un health check.
Ejecutar en desarrollo con: python main.py
"""
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from attendance_sync.api.middlewares.error_handler import ErrorHandlerMiddleware
from attendance_sync.api.v1.router import api_router
from attendance_sync.core.config import Settings, get_cors_origins, settings
from attendance_sync.core.events import lifespan
from attendance_sync.core.sync_config import SyncConfig
from attendance_sync.shared.exceptions.base import AppException
from attendance_sync.shared.exceptions.sync import ConfigurationError


def _sync_readiness(app_settings: Settings) -> Dict[str, Any]:
    """Estado de la configuracion de sync para el health check (sin I/O)."""
    try:
        config = SyncConfig.from_settings(app_settings)
    except ConfigurationError as e:
        return {"configured": False, "missing": e.missing}
    return {
        "configured": True,
        "datastore_backend": config.datastore_backend,
        "sheet_url": config.sheet_url,
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Traduce las excepciones de la aplicacion al cuerpo de error de la API."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_application(app_settings: Settings = settings) -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Args:
        app_settings: Configuracion a usar (los tests pueden inyectar otra)

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Sincronizacion de asistencia entre Google Sheets y la base de datos",
        lifespan=lifespan,
    )

    # El ultimo middleware agregado es el mas externo: CORS envuelve tambien los 500 genericos
    application.add_middleware(ErrorHandlerMiddleware)

    # Los endpoints se llaman desde Apps Script y paneles web de otros dominios
    cors_origins = get_cors_origins(app_settings.CORS_ORIGINS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.include_router(api_router, prefix="/api")
    application.add_exception_handler(AppException, app_exception_handler)

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Estado del servicio y de la configuracion de sync."""
        return {
            "status": "healthy",
            "app_name": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "environment": app_settings.ENVIRONMENT,
            "sync": _sync_readiness(app_settings),
        }

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
