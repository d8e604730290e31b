"""
Interfaz de acceso a la hoja de calculo.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence


class ISpreadsheetGateway(ABC):
    """Lectura y escritura de rangos A1 de una hoja."""

    @property
    @abstractmethod
    def sheet_url(self) -> str:
        """URL de la hoja para mostrar al usuario."""

    @abstractmethod
    def read_rows(self, range_spec: str = "A:I") -> List[List[str]]:
        """
        Lee todas las filas del rango, header incluido.

        Returns:
            List[List[str]]: Filas tal como vienen de la API (sin padding)
        """

    @abstractmethod
    def write_range(self, range_spec: str, values: Sequence[Sequence[str]]) -> None:
        """Escribe valores en un rango A1 (USER_ENTERED)."""
