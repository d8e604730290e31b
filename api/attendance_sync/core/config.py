"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.

Las credenciales de Google Sheets y del datastore NO se validan aqui:
el servicio arranca igual y cada invocacion de sync falla rapido
(ConfigurationError) si falta algo. Ver core/sync_config.py.
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Backends de datastore soportados (DATASTORE_BACKEND):
    - 'postgrest': API REST (Supabase / PostgREST) con DATASTORE_URL + DATASTORE_API_KEY
    - 'postgres': conexion directa con DATABASE_URL (psycopg)
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Attendance Sheets Sync")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Google Sheets (service account)
    SHEET_ID: str = Field(default="")
    SHEET_NAME: str = Field(default="")
    GOOGLE_CLIENT_EMAIL: str = Field(default="")
    # La clave suele venir con "\n" escapados desde el .env / secret manager
    GOOGLE_PRIVATE_KEY: str = Field(default="")

    # Datastore
    DATASTORE_BACKEND: str = Field(default="postgrest")
    DATASTORE_URL: str = Field(default="")
    DATASTORE_API_KEY: str = Field(default="")
    DATASTORE_TABLE: str = Field(default="employee_attendance")
    DATABASE_URL: str = Field(default="")

    # Sync
    SYNC_SOURCE_ID: str = Field(default="")
    SYNC_BATCH_SIZE: int = Field(default=10)
    SYNC_BATCH_PAUSE_MS: int = Field(default=50)
    SYNC_MAX_ATTEMPTS: int = Field(default=3)
    HTTP_TIMEOUT_S: int = Field(default=30)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def effective_source_id(self) -> str:
        """
        Identificador de la fuente de sync.
        Si SYNC_SOURCE_ID no esta definido se usa el SHEET_ID.
        """
        return self.SYNC_SOURCE_ID or self.SHEET_ID

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
