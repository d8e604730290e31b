"""
Entidades del dominio de asistencia.

Se mantienen libres de I/O para poder testearlas facilmente.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

# Layout fijo de la hoja (A:I). La fila 1 es header, los datos empiezan en la fila 2.
SHEET_HEADERS: list[str] = [
    "Date",
    "Employee Id",
    "Employee Name",
    "Email ID",
    "First In",
    "Last Out",
    "Late Login",
    "Shift Name",
    "Status",
]
SHEET_COLUMN_COUNT = len(SHEET_HEADERS)
SHEET_RANGE = "A:I"
STATUS_COLUMN = "I"
HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1


class RowStatus(str, Enum):
    """Marcador escrito en la columna Status de cada fila."""
    SAVED = "✅ Saved"
    FAILED = "❌ Failed"
    INVALID = "⚠️ Invalid"
    EXPORTED = "✅ From Database"


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SpreadsheetRow:
    """
    Fila cruda de la hoja, ya posicionada.

    cells se rellena a la derecha con "" hasta 9 columnas; Sheets omite
    las celdas vacias al final de cada fila.
    """

    row_number: int
    cells: tuple[str, ...]

    @classmethod
    def from_values(cls, row_number: int, values: list[Any]) -> "SpreadsheetRow":
        cells = ["" if v is None else str(v).strip() for v in values[:SHEET_COLUMN_COUNT]]
        cells.extend([""] * (SHEET_COLUMN_COUNT - len(cells)))
        return cls(row_number=row_number, cells=tuple(cells))

    @property
    def date(self) -> str:
        return self.cells[0]

    @property
    def employee_id(self) -> str:
        return self.cells[1]

    @property
    def employee_name(self) -> str:
        return self.cells[2]

    @property
    def email_id(self) -> str:
        return self.cells[3]

    @property
    def first_in(self) -> str:
        return self.cells[4]

    @property
    def last_out(self) -> str:
        return self.cells[5]

    @property
    def late_login(self) -> str:
        return self.cells[6]

    @property
    def shift_name(self) -> str:
        return self.cells[7]

    @property
    def status(self) -> str:
        return self.cells[8]


@dataclass(frozen=True)
class AttendanceRecord:
    """
    Asistencia de un empleado en un dia.

    - date: YYYY-MM-DD
    - first_in / last_out / late_login: HH:MM:SS o None
    - (sheet_source_id, sheet_row_number): clave de deduplicacion
    """

    date: str
    employee_id: str
    employee_name: str
    email_id: str = ""
    first_in: Optional[str] = None
    last_out: Optional[str] = None
    late_login: Optional[str] = None
    shift_name: str = ""
    sheet_row_number: Optional[int] = None
    sheet_source_id: Optional[str] = None
    sheet_synced_at: Optional[datetime] = None

    def to_row(self) -> dict[str, Any]:
        """Dict con nombres de columna del datastore, listo para INSERT."""
        return {
            "date": self.date,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "email_id": self.email_id,
            "first_in": self.first_in,
            "last_out": self.last_out,
            "late_login": self.late_login,
            "shift_name": self.shift_name,
            "sheet_row_number": self.sheet_row_number,
            "sheet_source_id": self.sheet_source_id,
            "sheet_synced_at": self.sheet_synced_at.isoformat() if self.sheet_synced_at else None,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "AttendanceRecord":
        """
        Construye el registro desde una fila del datastore.

        Tolera tipos nativos (date/time/datetime de psycopg) y strings (PostgREST).
        """
        synced_at = row.get("sheet_synced_at")
        if isinstance(synced_at, str) and synced_at:
            synced_at = datetime.fromisoformat(synced_at.replace("Z", "+00:00"))
        row_number = row.get("sheet_row_number")
        return cls(
            date=_as_text(row.get("date")),
            employee_id=_as_text(row.get("employee_id")),
            employee_name=_as_text(row.get("employee_name")),
            email_id=_as_text(row.get("email_id")),
            first_in=_as_time_text(row.get("first_in")),
            last_out=_as_time_text(row.get("last_out")),
            late_login=_as_time_text(row.get("late_login")),
            shift_name=_as_text(row.get("shift_name")),
            sheet_row_number=int(row_number) if row_number is not None else None,
            sheet_source_id=row.get("sheet_source_id"),
            sheet_synced_at=synced_at or None,
        )

    def to_sheet_values(self, status: str) -> list[str]:
        """Fila de 9 celdas para la hoja; los opcionales ausentes van como ""."""
        return [
            self.date,
            self.employee_id,
            self.employee_name,
            self.email_id or "",
            self.first_in or "",
            self.last_out or "",
            self.late_login or "",
            self.shift_name or "",
            status,
        ]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _as_time_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M:%S")
    return str(value)
