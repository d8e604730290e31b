"""
Exportacion datastore -> Google Sheets (outbound).

- Resuelve el rango de fechas (default: primer dia del mes actual -> hoy)
- Trae los registros del rango, ordenados date desc, employee_id asc
- Hoja vacia: escribe header + datos desde la fila 2
- Hoja con datos: marca Status de las filas existentes y agrega los
  registros al final. No hay deteccion de duplicados contra la hoja:
  exportar dos veces el mismo rango duplica filas.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from loguru import logger

from attendance_sync.application.services.field_normalizer import parse_loose_date
from attendance_sync.core.sync_config import SyncConfig
from attendance_sync.domain.entities.attendance import (
    FIRST_DATA_ROW,
    SHEET_HEADERS,
    SHEET_RANGE,
    STATUS_COLUMN,
    AttendanceRecord,
    RowStatus,
)
from attendance_sync.domain.repositories.attendance_store import IAttendanceStore
from attendance_sync.domain.repositories.spreadsheet_gateway import ISpreadsheetGateway

EXPORT_MARKER = RowStatus.EXPORTED.value


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


@dataclass(frozen=True)
class RangeWrite:
    range_spec: str
    values: list[list[str]]


@dataclass
class OutboundSyncResult:
    date_range: DateRange
    records_synced: int
    sheet_url: str

    def to_details(self) -> dict[str, Any]:
        return {
            "dateRange": str(self.date_range),
            "recordsSynced": self.records_synced,
            "sheetUrl": self.sheet_url,
        }


def default_date_range(today: date) -> DateRange:
    return DateRange(start=today.replace(day=1), end=today)


def resolve_date_range(
    start_raw: Optional[Any],
    end_raw: Optional[Any],
    *,
    today: date,
) -> DateRange:
    """
    Resuelve el rango pedido por el caller. Nunca lanza.

    Cada extremo que falte o no se pueda parsear cae al default
    (inicio: primer dia del mes de `today`, fin: `today`).
    Si quedan invertidos se intercambian.
    """
    default = default_date_range(today)
    start = parse_loose_date(start_raw) if isinstance(start_raw, str) else None
    end = parse_loose_date(end_raw) if isinstance(end_raw, str) else None

    if start_raw is not None and start is None:
        logger.warning(f"startDate invalida '{start_raw}', usando {default.start}")
    if end_raw is not None and end is None:
        logger.warning(f"endDate invalida '{end_raw}', usando {default.end}")

    start = start or default.start
    end = end or default.end
    if start > end:
        start, end = end, start
    return DateRange(start=start, end=end)


def select_for_export(records: Iterable[AttendanceRecord], date_range: DateRange) -> list[AttendanceRecord]:
    """
    Filtra por rango inclusivo y ordena date desc, employee_id asc.
    Las fechas canonicas YYYY-MM-DD ordenan igual como texto.
    """
    start = date_range.start.isoformat()
    end = date_range.end.isoformat()
    selected = [r for r in records if start <= r.date <= end]
    selected.sort(key=lambda r: r.employee_id)
    selected.sort(key=lambda r: r.date, reverse=True)
    return selected


def plan_sheet_writes(
    existing_rows: Sequence[Sequence[Any]],
    export_rows: Sequence[list[str]],
) -> list[RangeWrite]:
    """
    Calcula las escrituras A1 necesarias (sin I/O).

    existing_rows es el contenido actual de A:I, header incluido.
    """
    writes: list[RangeWrite] = []
    last_column = STATUS_COLUMN

    if not existing_rows:
        writes.append(RangeWrite(f"A1:{last_column}1", [list(SHEET_HEADERS)]))
        if export_rows:
            end_row = FIRST_DATA_ROW + len(export_rows) - 1
            writes.append(RangeWrite(f"A{FIRST_DATA_ROW}:{last_column}{end_row}", [list(r) for r in export_rows]))
        return writes

    existing_data_rows = len(existing_rows) - 1
    if existing_data_rows > 0:
        end_row = FIRST_DATA_ROW + existing_data_rows - 1
        writes.append(
            RangeWrite(
                f"{STATUS_COLUMN}{FIRST_DATA_ROW}:{STATUS_COLUMN}{end_row}",
                [[EXPORT_MARKER] for _ in range(existing_data_rows)],
            )
        )

    if export_rows:
        start_row = len(existing_rows) + 1
        end_row = start_row + len(export_rows) - 1
        writes.append(RangeWrite(f"A{start_row}:{last_column}{end_row}", [list(r) for r in export_rows]))

    return writes


class OutboundSyncUseCase:
    """
    Orquestador del pipeline datastore -> Sheets.
    """

    def __init__(
        self,
        *,
        config: SyncConfig,
        sheets: ISpreadsheetGateway,
        store: IAttendanceStore,
    ) -> None:
        self._config = config
        self._sheets = sheets
        self._store = store

    def execute(self, date_range: DateRange) -> OutboundSyncResult:
        logger.info(f"Sync datastore -> Sheets para el rango {date_range}")

        fetched = self._store.fetch_by_date_range(date_range.start, date_range.end)
        records = select_for_export(fetched, date_range)
        logger.info(f"Registros encontrados en el datastore: {len(records)}")

        export_rows = [r.to_sheet_values(EXPORT_MARKER) for r in records]

        existing_rows = self._sheets.read_rows(SHEET_RANGE)
        logger.info(f"La hoja tiene {len(existing_rows)} fila(s) actualmente")
        if not existing_rows:
            logger.info("Hoja vacia: se escriben header y datos")

        for write in plan_sheet_writes(existing_rows, export_rows):
            self._sheets.write_range(write.range_spec, write.values)

        logger.success(f"Google Sheets actualizado: {len(export_rows)} registro(s) exportados")
        return OutboundSyncResult(
            date_range=date_range,
            records_synced=len(export_rows),
            sheet_url=self._sheets.sheet_url,
        )
