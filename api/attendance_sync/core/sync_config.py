"""
Configuracion inmutable de una corrida de sync.

Se construye UNA vez desde Settings (host: API o CLI) y se inyecta
explicitamente en los casos de uso. El core nunca lee variables de entorno.

Este modulo no realiza I/O: solo valida y empaqueta configuracion.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from attendance_sync.core.config import Settings
from attendance_sync.shared.exceptions.sync import ConfigurationError

SUPPORTED_BACKENDS = ("postgrest", "postgres")


@dataclass(frozen=True)
class GoogleCredentials:
    client_email: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class SyncConfig:
    """
    Config de una hoja de calculo <-> una tabla del datastore.

    source_id:
        forma parte de la clave (sheet_source_id, sheet_row_number).
        Por defecto es el id de la hoja.
    """

    sheet_id: str
    sheet_name: str
    google: GoogleCredentials
    datastore_backend: str
    datastore_url: str
    datastore_api_key: str = field(repr=False)
    datastore_table: str
    database_url: str = field(repr=False)
    source_id: str
    batch_size: int = 10
    batch_pause_s: float = 0.05
    max_attempts: int = 3
    http_timeout_s: int = 30

    @property
    def sheet_url(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self.sheet_id}/edit"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncConfig":
        """
        Valida y construye la configuracion.

        Raises:
            ConfigurationError: con la lista completa de variables faltantes.
        """
        missing: list[str] = []
        if not settings.SHEET_ID:
            missing.append("SHEET_ID")
        if not settings.GOOGLE_CLIENT_EMAIL:
            missing.append("GOOGLE_CLIENT_EMAIL")
        if not settings.GOOGLE_PRIVATE_KEY:
            missing.append("GOOGLE_PRIVATE_KEY")

        backend = (settings.DATASTORE_BACKEND or "").strip().lower()
        if backend not in SUPPORTED_BACKENDS:
            missing.append(f"DATASTORE_BACKEND (uno de: {', '.join(SUPPORTED_BACKENDS)})")
        elif backend == "postgrest":
            if not settings.DATASTORE_URL:
                missing.append("DATASTORE_URL")
            if not settings.DATASTORE_API_KEY:
                missing.append("DATASTORE_API_KEY")
        elif not settings.DATABASE_URL:
            missing.append("DATABASE_URL")

        if missing:
            raise ConfigurationError(missing)

        return cls(
            sheet_id=settings.SHEET_ID,
            sheet_name=settings.SHEET_NAME,
            google=GoogleCredentials(
                client_email=settings.GOOGLE_CLIENT_EMAIL,
                private_key=_restore_newlines(settings.GOOGLE_PRIVATE_KEY),
            ),
            datastore_backend=backend,
            datastore_url=settings.DATASTORE_URL.rstrip("/"),
            datastore_api_key=settings.DATASTORE_API_KEY,
            datastore_table=settings.DATASTORE_TABLE,
            database_url=settings.DATABASE_URL,
            source_id=settings.effective_source_id,
            batch_size=max(1, settings.SYNC_BATCH_SIZE),
            batch_pause_s=max(0, settings.SYNC_BATCH_PAUSE_MS) / 1000.0,
            max_attempts=max(1, settings.SYNC_MAX_ATTEMPTS),
            http_timeout_s=settings.HTTP_TIMEOUT_S,
        )


def _restore_newlines(private_key: str) -> str:
    """Las claves PEM llegan con saltos de linea escapados ("\\n")."""
    return private_key.replace("\\n", "\n")
