"""
Datastore sobre la API REST de PostgREST / Supabase (sin SDKs externos).

Requisitos cubiertos:
- requests
- rate-limit/backoff (429, 5xx) respetando Retry-After
- insert idempotente: on_conflict=sheet_source_id,sheet_row_number + ignore-duplicates
- conteo exacto via header Content-Range
"""

from __future__ import annotations

import time
from datetime import date
from typing import Any, Optional, Sequence

import requests
from loguru import logger

from attendance_sync.domain.entities.attendance import AttendanceRecord
from attendance_sync.domain.repositories.attendance_store import IAttendanceStore
from attendance_sync.shared.exceptions.sync import DatastoreError

CONFLICT_COLUMNS = "sheet_source_id,sheet_row_number"
# PostgREST limita filas por respuesta (max-rows); paginamos con Range.
PAGE_SIZE = 1000


def parse_content_range_total(content_range: Optional[str]) -> Optional[int]:
    """
    Extrae el total de un header Content-Range ("0-9/42" o "*/0").
    """
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        return None
    return int(total)


class PostgrestAttendanceStore(IAttendanceStore):
    """
    Cliente HTTP de la tabla de asistencias.

    Importante:
    - date y time viajan como texto ISO; los devuelve igual.
    - 4xx (no 429) es error inmediato (config/auth/esquema mal).
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        table: str = "employee_attendance",
        session: Optional[requests.Session] = None,
        timeout_s: int = 30,
        max_retries: int = 4,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._table = table
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._session = session or requests.Session()

    @property
    def _table_url(self) -> str:
        return f"{self._base_url}/rest/v1/{self._table}"

    def fetch_synced_row_numbers(self, source_id: str) -> set[int]:
        rows = self._get_all(
            [
                ("select", "sheet_row_number"),
                ("sheet_source_id", f"eq.{source_id}"),
                ("sheet_row_number", "not.is.null"),
                ("order", "sheet_row_number.asc"),
            ]
        )
        return {int(r["sheet_row_number"]) for r in rows if r.get("sheet_row_number") is not None}

    def insert_records(self, records: Sequence[AttendanceRecord]) -> int:
        if not records:
            return 0
        # Con ignore-duplicates la representacion trae solo las filas insertadas
        resp = self._request(
            "POST",
            query=[("on_conflict", CONFLICT_COLUMNS), ("select", "sheet_row_number")],
            json=[r.to_row() for r in records],
            prefer="resolution=ignore-duplicates,return=representation",
        )
        inserted = resp.json() or []
        return len(inserted)

    def fetch_by_date_range(self, start: date, end: date) -> list[AttendanceRecord]:
        rows = self._get_all(
            [
                ("select", "*"),
                ("date", f"gte.{start.isoformat()}"),
                ("date", f"lte.{end.isoformat()}"),
                ("order", "date.desc,employee_id.asc,id.asc"),
            ]
        )
        return [AttendanceRecord.from_row(r) for r in rows]

    def count_records(self, source_id: str) -> int:
        resp = self._request(
            "HEAD",
            query=[("select", "*"), ("sheet_source_id", f"eq.{source_id}")],
            prefer="count=exact",
        )
        total = parse_content_range_total(resp.headers.get("Content-Range"))
        if total is None:
            raise DatastoreError(
                f"Respuesta de conteo sin Content-Range valido: {resp.headers.get('Content-Range')}"
            )
        return total

    def delete_source_records(self, source_id: str) -> int:
        resp = self._request(
            "DELETE",
            query=[("sheet_source_id", f"eq.{source_id}")],
            prefer="return=minimal,count=exact",
        )
        return parse_content_range_total(resp.headers.get("Content-Range")) or 0

    def _get_all(self, query: list[tuple[str, Any]]) -> list[dict[str, Any]]:
        """
        GET paginado con header Range.

        El servidor puede devolver menos filas que PAGE_SIZE (max-rows), asi
        que el avance es por filas recibidas y el corte por el total exacto
        de Content-Range. Sin total, se corta en la primera pagina vacia.
        La query debe traer un order total para que las paginas no se pisen.
        """
        out: list[dict[str, Any]] = []
        offset = 0
        total: Optional[int] = None
        while True:
            resp = self._request(
                "GET",
                query=query,
                prefer="count=exact" if offset == 0 else None,
                extra_headers={
                    "Range-Unit": "items",
                    "Range": f"{offset}-{offset + PAGE_SIZE - 1}",
                },
            )
            page = resp.json() or []
            if offset == 0:
                total = parse_content_range_total(resp.headers.get("Content-Range"))
            out.extend(page)
            offset += len(page)
            if not page or (total is not None and offset >= total):
                return out

    def _request(
        self,
        method: str,
        *,
        query: list[tuple[str, Any]],
        json: Any = None,
        prefer: Optional[str] = None,
        extra_headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """
        Request HTTP con backoff para 429/5xx.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx: exponencial con jitter.
        - 4xx (no 429): error inmediato.
        - Error de red: se trata como recuperable.
        """
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        if extra_headers:
            headers.update(extra_headers)

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.request(
                    method=method,
                    url=self._table_url,
                    params=query,
                    json=json,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except requests.RequestException as e:
                if attempt >= self._max_retries:
                    raise DatastoreError(f"Datastore no accesible tras {attempt} reintentos: {e}") from e
                time.sleep(self._backoff(attempt))
                continue

            if 200 <= resp.status_code < 300:
                return resp

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise DatastoreError(
                        f"Datastore error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        upstream_status=resp.status_code,
                    )

                retry_after = resp.headers.get("Retry-After")
                if retry_after:
                    try:
                        sleep_s = float(retry_after)
                    except ValueError:
                        sleep_s = self._min_backoff_s
                else:
                    sleep_s = self._backoff(attempt)

                logger.warning(f"Datastore respondio {resp.status_code}, reintentando en {sleep_s:.2f}s")
                time.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise DatastoreError(
                f"Datastore request {method} fallo {resp.status_code}: {resp.text}",
                upstream_status=resp.status_code,
            )

        raise DatastoreError("Datastore request sin respuesta")

    def _backoff(self, attempt: int) -> float:
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)
