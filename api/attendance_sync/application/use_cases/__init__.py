"""
Casos de uso de la aplicacion.
"""
from .inbound_sync_use_cases import InboundSyncUseCase
from .outbound_sync_use_cases import OutboundSyncUseCase

__all__ = ["InboundSyncUseCase", "OutboundSyncUseCase"]
