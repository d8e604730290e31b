"""
Entidades del dominio.
"""
from attendance_sync.domain.entities.attendance import (
    SHEET_HEADERS,
    AttendanceRecord,
    RowStatus,
    SpreadsheetRow,
)

__all__ = [
    "SHEET_HEADERS",
    "AttendanceRecord",
    "RowStatus",
    "SpreadsheetRow",
]
