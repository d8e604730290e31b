"""
Endpoints para sincronizacion de asistencia.
Permiten sincronizar Google Sheets con el datastore en ambos sentidos.
"""
import asyncio
import json
from datetime import date
from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from pydantic import ValidationError

from attendance_sync.api.v1.dependencies.use_case_deps import (
    get_inbound_use_case_factory,
    get_outbound_use_case_factory,
    get_today,
)
from attendance_sync.application.dto.sync_dto import (
    InboundSyncDetailsDTO,
    InboundSyncResponseDTO,
    OutboundSyncDetailsDTO,
    OutboundSyncRequestDTO,
    OutboundSyncResponseDTO,
)
from attendance_sync.application.use_cases.inbound_sync_use_cases import (
    InboundSyncResult,
    InboundSyncUseCase,
)
from attendance_sync.application.use_cases.outbound_sync_use_cases import (
    DateRange,
    OutboundSyncResult,
    OutboundSyncUseCase,
    resolve_date_range,
)


router = APIRouter(prefix="/sync", tags=["Sync"])


def _run_inbound(factory: Callable[[], InboundSyncUseCase], full_resync: bool) -> InboundSyncResult:
    """
    Construye y ejecuta el caso de uso inbound.
    Es sincrono y se ejecuta en un thread separado.
    """
    use_case = factory()
    return use_case.execute(full_resync=full_resync)


def _run_outbound(factory: Callable[[], OutboundSyncUseCase], date_range: DateRange) -> OutboundSyncResult:
    """Construye y ejecuta el caso de uso outbound (en thread separado)."""
    use_case = factory()
    return use_case.execute(date_range)


def _inbound_message(result: InboundSyncResult) -> str:
    if not result.lock_acquired:
        return "Ya hay una sincronizacion en curso para esta hoja; no se hizo nada"
    if not result.success:
        return f"No se pudo insertar ningun registro ({len(result.failed_rows)} fila(s) fallidas)"
    if result.partial:
        return (
            f"Sincronizacion parcial: {result.new_records} registro(s) nuevos, "
            f"{len(result.failed_rows)} fila(s) fallidas"
        )
    if result.new_records == 0:
        return "Sin filas nuevas en la hoja"
    return f"Sincronizacion completada: {result.new_records} registro(s) nuevos"


async def _read_export_request(request: Request) -> OutboundSyncRequestDTO:
    """
    Lee el cuerpo opcional del export.
    JSON invalido o con tipos inesperados se trata como cuerpo vacio.
    """
    raw = await request.body()
    if not raw:
        return OutboundSyncRequestDTO()
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Cuerpo del export no es JSON valido; se usa el rango por defecto")
        return OutboundSyncRequestDTO()
    if not isinstance(payload, dict):
        return OutboundSyncRequestDTO()
    try:
        return OutboundSyncRequestDTO.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Parametros de export ignorados: {e.error_count()} error(es) de validacion")
        return OutboundSyncRequestDTO()


@router.options("/from-sheets", include_in_schema=False)
@router.options("/to-sheets", include_in_schema=False)
async def sync_preflight() -> PlainTextResponse:
    """Acuse para preflight CORS."""
    return PlainTextResponse("ok")


@router.post(
    "/from-sheets",
    response_model=InboundSyncResponseDTO,
    summary="Sincronizar Google Sheets -> datastore",
)
async def sync_from_sheets(
    full_resync: bool = Query(
        default=False,
        description="Si True, borra los registros de la hoja en el datastore y re-importa todo",
    ),
    factory: Callable[[], InboundSyncUseCase] = Depends(get_inbound_use_case_factory),
) -> JSONResponse:
    """
    Importa las filas nuevas de la hoja al datastore.

    - Salta las filas ya persistidas (por numero de fila)
    - Inserta en batches secuenciales con reintentos
    - Escribe la columna Status con el resultado por fila

    Retorna 500 solo si habia filas para insertar y ningun batch entro.
    """
    sync_type = "completa (re-import)" if full_resync else "incremental"
    logger.info(f"Iniciando sincronizacion {sync_type} Sheets -> datastore desde API")

    # Ejecutar sync en thread separado para no bloquear el event loop
    result = await asyncio.to_thread(_run_inbound, factory, full_resync)

    details: Dict[str, Any] = result.to_details()
    response = InboundSyncResponseDTO(
        success=result.success,
        message=_inbound_message(result),
        code="PARTIAL" if result.partial else None,
        details=InboundSyncDetailsDTO(**details) if result.lock_acquired else None,
    )
    status_code = status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.info(f"Sync completado: {response.message}")
    content = response.model_dump(exclude_none=True)
    if response.details is not None:
        # totalInDatastore viaja como null cuando no se pudo verificar
        content["details"]["totalInDatastore"] = response.details.totalInDatastore
    return JSONResponse(status_code=status_code, content=content)


@router.post(
    "/to-sheets",
    response_model=OutboundSyncResponseDTO,
    summary="Exportar datastore -> Google Sheets",
)
async def sync_to_sheets(
    request: Request,
    factory: Callable[[], OutboundSyncUseCase] = Depends(get_outbound_use_case_factory),
    today: date = Depends(get_today),
) -> JSONResponse:
    """
    Exporta los registros de un rango de fechas a la hoja.

    Cuerpo opcional: {startDate|start_date, endDate|end_date}.
    Por defecto: primer dia del mes actual hasta hoy.
    """
    body = await _read_export_request(request)
    date_range = resolve_date_range(body.requested_start, body.requested_end, today=today)
    logger.info(f"Iniciando export datastore -> Sheets desde API ({date_range})")

    result = await asyncio.to_thread(_run_outbound, factory, date_range)

    response = OutboundSyncResponseDTO(
        success=True,
        message=f"{result.records_synced} registro(s) exportados a Google Sheets",
        details=OutboundSyncDetailsDTO(**result.to_details()),
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=response.model_dump())
