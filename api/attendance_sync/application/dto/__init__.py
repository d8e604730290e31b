"""
DTOs de la aplicacion.
"""
from .sync_dto import (
    InboundSyncDetailsDTO,
    InboundSyncResponseDTO,
    OutboundSyncDetailsDTO,
    OutboundSyncRequestDTO,
    OutboundSyncResponseDTO,
)

__all__ = [
    "InboundSyncDetailsDTO",
    "InboundSyncResponseDTO",
    "OutboundSyncDetailsDTO",
    "OutboundSyncRequestDTO",
    "OutboundSyncResponseDTO",
]
