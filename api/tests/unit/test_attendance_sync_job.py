"""
Tests del CLI del job de sincronizacion.
"""
import importlib.util
from pathlib import Path
from unittest.mock import Mock

import pytest

from attendance_sync.application.use_cases.inbound_sync_use_cases import InboundSyncResult
from attendance_sync.shared.exceptions.sync import ConfigurationError

_SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "attendance_sync_job.py"


@pytest.fixture
def job():
    spec = importlib.util.spec_from_file_location("attendance_sync_job", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _result(**overrides) -> InboundSyncResult:
    values = dict(
        total_rows=1,
        new_records=1,
        already_synced=0,
        invalid_rows=[],
        failed_rows=[],
        total_in_datastore=1,
        statuses={},
    )
    values.update(overrides)
    return InboundSyncResult(**values)


def test_schema_only_prints_ddl(job, capsys) -> None:
    assert job.main(["--schema-only"]) == 0
    out = capsys.readouterr().out
    assert "employee_attendance" in out
    assert "sheet_row_number" in out


def test_without_command_fails(job) -> None:
    assert job.main([]) == 1


def test_from_sheets_passes_full_resync(job, monkeypatch) -> None:
    use_case = Mock()
    use_case.execute.return_value = _result()
    monkeypatch.setattr(job, "build_inbound_use_case", lambda: use_case)

    assert job.main(["from-sheets", "--full-resync"]) == 0
    use_case.execute.assert_called_once_with(full_resync=True)


def test_from_sheets_all_failed_exits_1(job, monkeypatch) -> None:
    use_case = Mock()
    use_case.execute.return_value = _result(new_records=0, failed_rows=[2])
    monkeypatch.setattr(job, "build_inbound_use_case", lambda: use_case)

    assert job.main(["from-sheets"]) == 1


def test_configuration_error_exits_1(job, monkeypatch) -> None:
    def _raise():
        raise ConfigurationError(["SHEET_ID"])

    monkeypatch.setattr(job, "build_inbound_use_case", _raise)

    assert job.main(["from-sheets"]) == 1


def test_to_sheets_resolves_range(job, monkeypatch) -> None:
    use_case = Mock()
    use_case.execute.return_value = Mock(to_details=lambda: {"recordsSynced": 0})
    monkeypatch.setattr(job, "build_outbound_use_case", lambda: use_case)

    assert job.main(["to-sheets", "--start-date", "2025-01-31", "--end-date", "2025-01-01"]) == 0

    date_range = use_case.execute.call_args.args[0]
    assert str(date_range) == "2025-01-01 to 2025-01-31"
