"""
Cliente de Google Sheets API v4 (service account).

Requisitos cubiertos:
- google-auth para la credencial de service account (email + private key)
- google-api-python-client para spreadsheets.values get/update
- HttpError / errores de red -> SheetsApiError (UPSTREAM)
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from attendance_sync.core.sync_config import GoogleCredentials
from attendance_sync.domain.repositories.spreadsheet_gateway import ISpreadsheetGateway
from attendance_sync.shared.exceptions.sync import SheetsApiError

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

_SIMPLE_TITLE_RE = re.compile(r"^[A-Za-z0-9_]+$")


def quote_sheet_title(title: str) -> str:
    """Formatea el titulo de la pestaña para notacion A1."""
    normalised = (title or "").strip()
    if _SIMPLE_TITLE_RE.fullmatch(normalised):
        return normalised
    escaped = normalised.replace("'", "''")
    return f"'{escaped}'"


def a1_range(sheet_name: str, range_spec: str) -> str:
    """
    Prefija el rango con la pestaña si esta configurada.
    Sin pestaña la API usa la primera hoja del documento.
    """
    if not sheet_name or not sheet_name.strip():
        return range_spec
    return f"{quote_sheet_title(sheet_name)}!{range_spec}"


def _http_status(exc: HttpError) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        resp = getattr(exc, "resp", None)
        status = getattr(resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def build_sheets_service(credentials: GoogleCredentials):
    """Construye el recurso 'sheets' autenticado con la service account."""
    info = {
        "type": "service_account",
        "client_email": credentials.client_email,
        "private_key": credentials.private_key,
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    try:
        creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except ValueError as e:
        raise SheetsApiError(f"Credenciales de Google invalidas: {e}") from e
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


class GoogleSheetsGateway(ISpreadsheetGateway):
    """
    Acceso a una hoja concreta.

    Importante:
    - No interpreta valores: devuelve las celdas como texto (FORMATTED_VALUE).
    - El service se inyecta para poder testear sin red.
    """

    def __init__(
        self,
        *,
        spreadsheet_id: str,
        sheet_name: str = "",
        service: Any = None,
        credentials: Optional[GoogleCredentials] = None,
    ) -> None:
        if service is None:
            if credentials is None:
                raise ValueError("Se requiere service o credentials")
            service = build_sheets_service(credentials)
        self._service = service
        self._spreadsheet_id = spreadsheet_id
        self._sheet_name = sheet_name

    @property
    def sheet_url(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self._spreadsheet_id}/edit"

    def read_rows(self, range_spec: str = "A:I") -> list[list[str]]:
        target = a1_range(self._sheet_name, range_spec)
        try:
            payload = (
                self._service.spreadsheets()
                .values()
                .get(spreadsheetId=self._spreadsheet_id, range=target)
                .execute()
            )
        except HttpError as e:
            raise SheetsApiError(
                f"Google Sheets fallo al leer {target}: {e}",
                upstream_status=_http_status(e),
            ) from e
        except OSError as e:
            raise SheetsApiError(f"Google Sheets no accesible: {e}") from e

        rows = payload.get("values") or []
        return [[("" if cell is None else str(cell)) for cell in row] for row in rows]

    def write_range(self, range_spec: str, values: Sequence[Sequence[str]]) -> None:
        target = a1_range(self._sheet_name, range_spec)
        body = {"values": [list(row) for row in values]}
        try:
            (
                self._service.spreadsheets()
                .values()
                .update(
                    spreadsheetId=self._spreadsheet_id,
                    range=target,
                    valueInputOption="USER_ENTERED",
                    body=body,
                )
                .execute()
            )
        except HttpError as e:
            raise SheetsApiError(
                f"Google Sheets fallo al escribir {target}: {e}",
                upstream_status=_http_status(e),
            ) from e
        except OSError as e:
            raise SheetsApiError(f"Google Sheets no accesible: {e}") from e
        logger.debug(f"Escrito rango {target} ({len(body['values'])} fila(s))")
