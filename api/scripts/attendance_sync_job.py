"""
CLI: sincronizacion de asistencia Google Sheets <-> datastore.

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) para el import periodico.
  - El export se suele lanzar a demanda desde la API.

Variables de entorno requeridas (ver core/config.py):
  - SHEET_ID, GOOGLE_CLIENT_EMAIL, GOOGLE_PRIVATE_KEY
  - DATASTORE_URL + DATASTORE_API_KEY (backend postgrest)
  - DATABASE_URL (backend postgres)

Ejecución:
  python scripts/attendance_sync_job.py from-sheets
  python scripts/attendance_sync_job.py from-sheets --full-resync
  python scripts/attendance_sync_job.py to-sheets --start-date 2025-01-01 --end-date 2025-01-31
  python scripts/attendance_sync_job.py --schema-only
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `attendance_sync/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Settings se instancia al importar: cargar .env antes.
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from attendance_sync.api.v1.dependencies.use_case_deps import (  # noqa: E402
    build_inbound_use_case,
    build_outbound_use_case,
)
from attendance_sync.application.use_cases.outbound_sync_use_cases import resolve_date_range  # noqa: E402
from attendance_sync.shared.exceptions.base import AppException  # noqa: E402


def _read_schema_sql() -> str:
    sql_path = _API_ROOT / "attendance_sync" / "infrastructure" / "database" / "schema.sql"
    return sql_path.read_text(encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync de asistencia Google Sheets <-> datastore")
    parser.add_argument(
        "--schema-only",
        action="store_true",
        help="Solo imprime el DDL recomendado (no ejecuta sync).",
    )
    sub = parser.add_subparsers(dest="command")

    inbound = sub.add_parser("from-sheets", help="Importa las filas nuevas de la hoja al datastore.")
    inbound.add_argument(
        "--full-resync",
        action="store_true",
        help="Borra los registros de la hoja en el datastore y re-importa todo.",
    )

    outbound = sub.add_parser("to-sheets", help="Exporta un rango de fechas del datastore a la hoja.")
    outbound.add_argument("--start-date", default=None, help="Inicio del rango (default: primer dia del mes)")
    outbound.add_argument("--end-date", default=None, help="Fin del rango (default: hoy)")
    return parser


def _run_from_sheets(full_resync: bool) -> int:
    result = build_inbound_use_case().execute(full_resync=full_resync)
    if not result.lock_acquired:
        logger.warning("Otra corrida tiene el lock; no se hizo nada")
        return 0
    logger.info(f"Resultado: {result.to_details()}")
    if not result.success:
        logger.error(f"Ningun batch se pudo insertar. Filas fallidas: {result.failed_rows}")
        return 1
    if result.partial:
        logger.warning(f"Sync parcial. Filas fallidas: {result.failed_rows}")
    return 0


def _run_to_sheets(start_date: Optional[str], end_date: Optional[str]) -> int:
    date_range = resolve_date_range(start_date, end_date, today=date.today())
    result = build_outbound_use_case().execute(date_range)
    logger.info(f"Resultado: {result.to_details()}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.schema_only:
        print(_read_schema_sql())
        return 0

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "from-sheets":
            return _run_from_sheets(args.full_resync)
        return _run_to_sheets(args.start_date, args.end_date)
    except AppException as e:
        logger.error(f"[{e.error_code}] {e.message}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
