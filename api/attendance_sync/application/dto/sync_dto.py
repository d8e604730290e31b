"""
DTOs de los endpoints de sincronizacion.
Los nombres de campo en camelCase son parte del contrato con el frontend.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class InboundSyncDetailsDTO(BaseModel):
    """Detalle de una corrida Sheets -> datastore."""

    totalRows: int = Field(..., description="Filas de datos en la hoja (sin header)")
    newRecords: int = Field(..., description="Registros insertados en esta corrida")
    alreadySynced: int = Field(..., description="Filas saltadas por estar ya persistidas")
    invalidRows: int = Field(0, description="Filas descartadas por validacion")
    failedRows: Optional[List[int]] = Field(None, description="Filas de batches que fallaron")
    totalInDatastore: Optional[int] = Field(None, description="Total de registros de la fuente tras la corrida")


class InboundSyncResponseDTO(BaseModel):
    """Respuesta del sync Sheets -> datastore."""

    success: bool
    message: str
    code: Optional[str] = Field(None, description="PARTIAL si algun batch fallo")
    details: Optional[InboundSyncDetailsDTO] = None


class OutboundSyncRequestDTO(BaseModel):
    """
    Cuerpo opcional del export. Acepta camelCase y snake_case.
    Los valores invalidos no fallan: caen al rango por defecto.
    """

    startDate: Optional[str] = None
    start_date: Optional[str] = None
    endDate: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def requested_start(self) -> Optional[str]:
        return self.startDate or self.start_date

    @property
    def requested_end(self) -> Optional[str]:
        return self.endDate or self.end_date


class OutboundSyncDetailsDTO(BaseModel):
    dateRange: str
    recordsSynced: int
    sheetUrl: str


class OutboundSyncResponseDTO(BaseModel):
    """Respuesta del sync datastore -> Sheets."""

    success: bool
    message: str
    details: OutboundSyncDetailsDTO
