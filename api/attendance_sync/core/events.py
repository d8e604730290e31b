"""
Manejadores de eventos de inicio y cierre de la aplicacion.

El arranque nunca falla por configuracion de sync incompleta: solo advierte.
Cada request de sync valida de nuevo y responde CONFIG si falta algo.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from loguru import logger

from attendance_sync.core.config import settings
from attendance_sync.core.sync_config import SyncConfig
from attendance_sync.shared.exceptions.sync import ConfigurationError


def configure_file_logging() -> None:
    """Agrega el sink de archivo con rotacion (LOG_FILE)."""
    logger.add(
        settings.LOG_FILE,
        rotation="500 MB",
        retention="10 days",
        level=settings.LOG_LEVEL,
        enqueue=True,
    )


def log_sync_configuration() -> bool:
    """
    Loguea el estado de la configuracion de sync.

    Returns:
        bool: True si la configuracion esta completa
    """
    try:
        config = SyncConfig.from_settings(settings)
    except ConfigurationError as e:
        for name in e.missing:
            logger.warning(f"CONFIG: {name} no configurada - los endpoints de sync responderan CONFIG")
        return False

    logger.info(
        f"Sync configurado: {config.sheet_url} <-> {config.datastore_backend}:{config.datastore_table} "
        f"(fuente '{config.source_id}', batch={config.batch_size}, intentos={config.max_attempts})"
    )
    return True


async def on_startup() -> None:
    """Sink de archivo, estado de la configuracion y URLs utiles."""
    configure_file_logging()
    logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION} (entorno: {settings.ENVIRONMENT})")
    log_sync_configuration()

    access_host = "localhost" if settings.HOST == "0.0.0.0" else settings.HOST
    logger.opt(colors=True).info(f"<cyan>Docs: http://{access_host}:{settings.PORT}/docs</cyan>")
    logger.success("Aplicacion iniciada correctamente")


async def on_shutdown() -> None:
    # Los clientes de Sheets/datastore se crean por request: no hay recursos globales
    logger.success("Aplicacion cerrada correctamente")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Ciclo de vida de la aplicacion: arranque antes de servir, cierre al terminar.

    Args:
        app: Instancia de FastAPI
    """
    await on_startup()
    try:
        yield
    finally:
        await on_shutdown()
