"""
Dependencias para inyeccion de casos de uso.

Construyen SyncConfig una vez por request desde Settings y cablean los
colaboradores concretos (Google Sheets + datastore). Los tests las
reemplazan con app.dependency_overrides.
"""
from datetime import date

from attendance_sync.application.services.batch_executor import BatchExecutor, RetryPolicy
from attendance_sync.application.use_cases.inbound_sync_use_cases import InboundSyncUseCase
from attendance_sync.application.use_cases.outbound_sync_use_cases import OutboundSyncUseCase
from attendance_sync.core.config import Settings, settings
from attendance_sync.core.sync_config import SyncConfig
from attendance_sync.domain.repositories.attendance_store import IAttendanceStore
from attendance_sync.domain.repositories.spreadsheet_gateway import ISpreadsheetGateway
from attendance_sync.infrastructure.external.google_sheets.sheets_client import GoogleSheetsGateway
from attendance_sync.infrastructure.external.postgres.pg_store import PostgresAttendanceStore
from attendance_sync.infrastructure.external.postgrest.postgrest_store import PostgrestAttendanceStore


def build_attendance_store(config: SyncConfig) -> IAttendanceStore:
    """
    Construye el datastore segun DATASTORE_BACKEND.

    Args:
        config: Configuracion validada

    Returns:
        IAttendanceStore: PostgREST o Postgres directo
    """
    if config.datastore_backend == "postgres":
        return PostgresAttendanceStore(config.database_url, table=config.datastore_table)
    return PostgrestAttendanceStore(
        base_url=config.datastore_url,
        api_key=config.datastore_api_key,
        table=config.datastore_table,
        timeout_s=config.http_timeout_s,
    )


def build_spreadsheet_gateway(config: SyncConfig) -> ISpreadsheetGateway:
    """Construye el cliente de Google Sheets autenticado."""
    return GoogleSheetsGateway(
        spreadsheet_id=config.sheet_id,
        sheet_name=config.sheet_name,
        credentials=config.google,
    )


def build_inbound_use_case(app_settings: Settings = settings) -> InboundSyncUseCase:
    """
    Construye el caso de uso Sheets -> datastore.

    Raises:
        ConfigurationError: si falta configuracion obligatoria
    """
    config = SyncConfig.from_settings(app_settings)
    executor = BatchExecutor(
        policy=RetryPolicy(max_attempts=config.max_attempts),
        pause_s=config.batch_pause_s,
    )
    return InboundSyncUseCase(
        config=config,
        sheets=build_spreadsheet_gateway(config),
        store=build_attendance_store(config),
        executor=executor,
    )


def build_outbound_use_case(app_settings: Settings = settings) -> OutboundSyncUseCase:
    """
    Construye el caso de uso datastore -> Sheets.

    Raises:
        ConfigurationError: si falta configuracion obligatoria
    """
    config = SyncConfig.from_settings(app_settings)
    return OutboundSyncUseCase(
        config=config,
        sheets=build_spreadsheet_gateway(config),
        store=build_attendance_store(config),
    )


def get_inbound_use_case_factory():
    """
    Dependencia FastAPI: retorna la factory (no la instancia) para que la
    construccion, que puede fallar por configuracion, ocurra dentro del
    manejo de errores del endpoint.
    """
    return build_inbound_use_case


def get_outbound_use_case_factory():
    """Dependencia FastAPI: factory del caso de uso de export."""
    return build_outbound_use_case


def get_today() -> date:
    """Fecha de referencia para el rango por defecto del export."""
    return date.today()
