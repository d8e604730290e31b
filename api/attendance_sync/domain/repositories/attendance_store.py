"""
Interfaz del datastore de asistencias.
Define el contrato que debe cumplir cualquier implementación.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Sequence, Set

from attendance_sync.domain.entities.attendance import AttendanceRecord


class IAttendanceStore(ABC):
    """
    Interfaz del datastore de asistencias.
    Las implementaciones son sincronas: los pipelines corren en un thread.
    """

    @abstractmethod
    def fetch_synced_row_numbers(self, source_id: str) -> Set[int]:
        """
        Obtiene los numeros de fila de la hoja ya persistidos para una fuente.

        Args:
            source_id: Identificador de la fuente de sync

        Returns:
            Set[int]: Numeros de fila (1-indexed, header = 1)
        """

    @abstractmethod
    def insert_records(self, records: Sequence[AttendanceRecord]) -> int:
        """
        Inserta registros ignorando conflictos por (sheet_source_id, sheet_row_number).

        Args:
            records: Registros a insertar (un batch)

        Returns:
            int: Cantidad de registros realmente insertados (los conflictos no cuentan)

        Raises:
            DatastoreError: si el datastore rechaza el batch
        """

    @abstractmethod
    def fetch_by_date_range(self, start: date, end: date) -> List[AttendanceRecord]:
        """
        Obtiene registros con date en [start, end], ordenados por
        date desc, employee_id asc.
        """

    @abstractmethod
    def count_records(self, source_id: str) -> int:
        """Cuenta los registros persistidos para una fuente."""

    @abstractmethod
    def delete_source_records(self, source_id: str) -> int:
        """Borra todos los registros de una fuente (re-import completo)."""

    @contextmanager
    def run_lock(self, source_id: str) -> Iterator[bool]:
        """
        Evita corridas simultaneas sobre la misma fuente.
        Por defecto no hay lock: siempre se obtiene.
        """
        yield True
