"""
Sincronizacion Google Sheets -> datastore (inbound).

Diseño (resumen):
- Lee todas las filas de la hoja (A:I, fila 1 = header)
- Lee del datastore los numeros de fila ya persistidos para la fuente
- Salta las filas ya persistidas (dedup puramente posicional)
- Normaliza y valida el resto; las invalidas se descartan (y se loguean)
- Inserta en batches secuenciales (BatchExecutor)
- Escribe UNA vez la columna Status con el resultado por fila

Estrategia de idempotencia:
- El estado "ya sincronizado" se reconstruye en cada corrida desde el datastore.
- Solo cuenta lo PERSISTIDO: una fila invalida o de un batch fallido
  se reintenta en la proxima corrida.
- El datastore ignora conflictos por (sheet_source_id, sheet_row_number).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from loguru import logger

from attendance_sync.application.services.batch_executor import BatchExecutor, BatchOutcome
from attendance_sync.application.services.field_normalizer import (
    is_canonical_date,
    normalize_date,
    normalize_time,
)
from attendance_sync.core.sync_config import SyncConfig
from attendance_sync.domain.entities.attendance import (
    FIRST_DATA_ROW,
    SHEET_RANGE,
    STATUS_COLUMN,
    AttendanceRecord,
    RowStatus,
    SpreadsheetRow,
    utc_now,
)
from attendance_sync.domain.repositories.attendance_store import IAttendanceStore
from attendance_sync.domain.repositories.spreadsheet_gateway import ISpreadsheetGateway


@dataclass(frozen=True)
class InvalidRow:
    row_number: int
    reason: str


@dataclass
class InboundPlan:
    """Resultado puro de la reconciliacion (sin I/O)."""

    total_rows: int
    new_records: list[AttendanceRecord] = field(default_factory=list)
    already_synced: list[int] = field(default_factory=list)
    invalid_rows: list[InvalidRow] = field(default_factory=list)

    @property
    def data_row_numbers(self) -> list[int]:
        return list(range(FIRST_DATA_ROW, FIRST_DATA_ROW + self.total_rows))


@dataclass
class InboundSyncResult:
    total_rows: int
    new_records: int
    already_synced: int
    invalid_rows: list[int]
    failed_rows: list[int]
    total_in_datastore: Optional[int]
    statuses: dict[int, RowStatus]
    lock_acquired: bool = True
    # Filas de batches OK que el datastore ignoro por conflicto (otra corrida las guardo)
    conflict_skipped: int = 0

    @property
    def landed(self) -> int:
        return self.new_records + self.conflict_skipped

    @property
    def attempted(self) -> int:
        return self.landed + len(self.failed_rows)

    @property
    def success(self) -> bool:
        """Falla solo si habia registros para insertar y ninguno entro."""
        if not self.lock_acquired:
            return True
        return not (self.attempted > 0 and self.landed == 0)

    @property
    def partial(self) -> bool:
        return self.landed > 0 and bool(self.failed_rows)

    def to_details(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "totalRows": self.total_rows,
            "newRecords": self.new_records,
            "alreadySynced": self.already_synced,
            "invalidRows": len(self.invalid_rows),
            "totalInDatastore": self.total_in_datastore,
        }
        if self.failed_rows:
            details["failedRows"] = self.failed_rows
        return details


def row_to_record(
    row: SpreadsheetRow,
    *,
    source_id: str,
    synced_at: datetime,
) -> tuple[Optional[AttendanceRecord], Optional[str]]:
    """
    Mapea una fila de la hoja a un AttendanceRecord.

    Returns:
        (record, None) si la fila es valida; (None, motivo) si no.
    """
    parsed_date = normalize_date(row.date)
    if not parsed_date:
        return None, "fecha vacia"
    if not is_canonical_date(parsed_date):
        return None, f"fecha no interpretable '{row.date}'"
    if not row.employee_id:
        return None, "employee_id vacio"
    if not row.employee_name:
        return None, "employee_name vacio"

    record = AttendanceRecord(
        date=parsed_date,
        employee_id=row.employee_id,
        employee_name=row.employee_name,
        email_id=row.email_id,
        first_in=normalize_time(row.first_in),
        last_out=normalize_time(row.last_out),
        late_login=normalize_time(row.late_login),
        shift_name=row.shift_name,
        sheet_row_number=row.row_number,
        sheet_source_id=source_id,
        sheet_synced_at=synced_at,
    )
    return record, None


def plan_inbound_sync(
    sheet_values: Sequence[Sequence[Any]],
    persisted_row_numbers: set[int],
    *,
    source_id: str,
    synced_at: Optional[datetime] = None,
) -> InboundPlan:
    """
    Calcula que insertar a partir del snapshot de la hoja y el set persistido.

    sheet_values incluye el header (fila 1), tal como lo devuelve la API.
    """
    synced_at = synced_at or utc_now()
    data_values = list(sheet_values[1:]) if sheet_values else []
    plan = InboundPlan(total_rows=len(data_values))

    for offset, values in enumerate(data_values):
        row_number = FIRST_DATA_ROW + offset
        if row_number in persisted_row_numbers:
            plan.already_synced.append(row_number)
            continue

        row = SpreadsheetRow.from_values(row_number, list(values or []))
        record, reason = row_to_record(row, source_id=source_id, synced_at=synced_at)
        if record is None:
            logger.warning(f"Fila {row_number} descartada: {reason}")
            plan.invalid_rows.append(InvalidRow(row_number=row_number, reason=reason or ""))
            continue
        plan.new_records.append(record)

    return plan


def _inserted_count(outcome: BatchOutcome[AttendanceRecord]) -> int:
    """Filas realmente insertadas por un batch OK (el store puede ignorar conflictos)."""
    if isinstance(outcome.result, int) and not isinstance(outcome.result, bool):
        return min(max(outcome.result, 0), len(outcome.items))
    return len(outcome.items)


def build_status_column(
    plan: InboundPlan,
    failed_rows: set[int],
) -> dict[int, RowStatus]:
    """Estado por fila (una entrada por cada fila de datos)."""
    invalid = {r.row_number for r in plan.invalid_rows}
    statuses: dict[int, RowStatus] = {}
    for row_number in plan.data_row_numbers:
        if row_number in invalid:
            statuses[row_number] = RowStatus.INVALID
        elif row_number in failed_rows:
            statuses[row_number] = RowStatus.FAILED
        else:
            statuses[row_number] = RowStatus.SAVED
    return statuses


class InboundSyncUseCase:
    """
    Orquestador del pipeline Sheets -> datastore para una hoja.
    """

    def __init__(
        self,
        *,
        config: SyncConfig,
        sheets: ISpreadsheetGateway,
        store: IAttendanceStore,
        executor: BatchExecutor,
    ) -> None:
        self._config = config
        self._sheets = sheets
        self._store = store
        self._executor = executor

    def execute(self, *, full_resync: bool = False) -> InboundSyncResult:
        """
        Ejecuta una corrida completa.

        Args:
            full_resync: Si True, borra los registros de la fuente y re-importa todo
        """
        source_id = self._config.source_id
        with self._store.run_lock(source_id) as acquired:
            if not acquired:
                logger.warning("Sync ya está corriendo (lock ocupado). Saliendo.")
                return InboundSyncResult(
                    total_rows=0,
                    new_records=0,
                    already_synced=0,
                    invalid_rows=[],
                    failed_rows=[],
                    total_in_datastore=None,
                    statuses={},
                    lock_acquired=False,
                )
            return self._run(source_id, full_resync=full_resync)

    def _run(self, source_id: str, *, full_resync: bool) -> InboundSyncResult:
        logger.info(f"Sync Sheets -> datastore: hoja '{self._config.sheet_id}' (fuente '{source_id}')")

        sheet_values = self._sheets.read_rows(SHEET_RANGE)
        logger.info(f"Filas leidas de la hoja: {len(sheet_values)} (header incluido)")

        if full_resync:
            deleted = self._store.delete_source_records(source_id)
            logger.info(f"Re-import completo: {deleted} registro(s) borrados de la fuente '{source_id}'")
            persisted: set[int] = set()
        else:
            persisted = self._store.fetch_synced_row_numbers(source_id)
        logger.info(f"Filas ya persistidas: {len(persisted)}")

        plan = plan_inbound_sync(sheet_values, persisted, source_id=source_id)
        logger.info(
            f"Plan: {len(plan.new_records)} nuevas, {len(plan.already_synced)} ya sincronizadas, "
            f"{len(plan.invalid_rows)} invalidas (de {plan.total_rows} filas)"
        )

        outcomes = self._executor.run(
            plan.new_records,
            batch_size=self._config.batch_size,
            submit=self._store.insert_records,
        )
        sent = sum(len(o.items) for o in outcomes if o.ok)
        inserted = sum(_inserted_count(o) for o in outcomes if o.ok)
        if inserted < sent:
            logger.warning(f"{sent - inserted} fila(s) ya estaban en el datastore (conflicto ignorado)")
        failed_rows = sorted(
            r.sheet_row_number
            for o in outcomes
            if not o.ok
            for r in o.items
            if r.sheet_row_number is not None
        )

        statuses = build_status_column(plan, set(failed_rows))
        self._write_statuses(statuses)

        total_in_datastore = self._count_safely(source_id)

        result = InboundSyncResult(
            total_rows=plan.total_rows,
            new_records=inserted,
            already_synced=len(plan.already_synced),
            invalid_rows=[r.row_number for r in plan.invalid_rows],
            failed_rows=failed_rows,
            total_in_datastore=total_in_datastore,
            statuses=statuses,
            conflict_skipped=sent - inserted,
        )
        logger.success(
            f"Sync completado. insertados={inserted}, fallidos={len(failed_rows)}, "
            f"total_en_datastore={total_in_datastore}"
        )
        return result

    def _write_statuses(self, statuses: dict[int, RowStatus]) -> None:
        if not statuses:
            return
        first = min(statuses)
        last = max(statuses)
        values = [[statuses[n].value] for n in range(first, last + 1)]
        self._sheets.write_range(f"{STATUS_COLUMN}{first}:{STATUS_COLUMN}{last}", values)
        logger.info(f"Columna Status actualizada para {len(values)} fila(s)")

    def _count_safely(self, source_id: str) -> Optional[int]:
        try:
            return self._store.count_records(source_id)
        except Exception as e:
            logger.warning(f"No se pudo verificar el total en el datastore: {e}")
            return None
