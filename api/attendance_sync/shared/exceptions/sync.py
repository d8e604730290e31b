"""
Excepciones de los pipelines de sincronizacion Sheets <-> base de datos.

Taxonomia estable (campo "code" de las respuestas):
- CONFIG: falta configuracion obligatoria (aborta la corrida)
- UPSTREAM: Google Sheets o el datastore no responden / responden no-2xx
- PARTIAL: algunos batches fallaron (solo aparece en respuestas, no se lanza)
"""
from typing import Any, Dict, Iterable, Optional

from attendance_sync.shared.exceptions.base import AppException


class ConfigurationError(AppException):
    """Falta una variable de configuracion obligatoria."""

    def __init__(self, missing: Iterable[str]):
        missing_list = sorted(set(missing))
        super().__init__(
            message=f"Faltan variables de configuracion obligatorias: {', '.join(missing_list)}",
            status_code=500,
            error_code="CONFIG",
            details={"missing": missing_list},
        )
        self.missing = missing_list


class UpstreamError(AppException):
    """Error de integracion con un servicio externo (Sheets o datastore)."""

    def __init__(
        self,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if upstream_status is not None:
            merged["upstream_status"] = upstream_status
        super().__init__(
            message=message,
            status_code=502,
            error_code="UPSTREAM",
            details=merged,
        )
        self.upstream_status = upstream_status


class SheetsApiError(UpstreamError):
    """La API de Google Sheets fallo o no es accesible."""


class DatastoreError(UpstreamError):
    """El datastore (PostgREST o Postgres) fallo o no es accesible."""

