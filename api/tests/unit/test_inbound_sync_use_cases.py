"""
Tests unitarios del sync Google Sheets -> datastore.

Usan fakes en memoria de la hoja y del datastore; no hay red.
"""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone

import pytest

from attendance_sync.application.services.batch_executor import BatchExecutor, RetryPolicy
from attendance_sync.application.use_cases.inbound_sync_use_cases import (
    InboundSyncUseCase,
    build_status_column,
    plan_inbound_sync,
    row_to_record,
)
from attendance_sync.core.sync_config import GoogleCredentials, SyncConfig
from attendance_sync.domain.entities.attendance import SHEET_HEADERS, RowStatus, SpreadsheetRow
from attendance_sync.domain.repositories.attendance_store import IAttendanceStore
from attendance_sync.domain.repositories.spreadsheet_gateway import ISpreadsheetGateway
from attendance_sync.shared.exceptions.sync import DatastoreError, SheetsApiError

SOURCE = "sheet-abc"
SYNCED_AT = datetime(2025, 12, 16, 10, 0, tzinfo=timezone.utc)


def _row(day="16 Dec 25", emp_id="E1", name="Ana", first_in="9:05 am", status=""):
    return [day, emp_id, name, "ana@example.com", first_in, "6:00 pm", "-0:20:00", "Morning", status]


class FakeSheets(ISpreadsheetGateway):
    def __init__(self, values, fail_writes=False):
        self.values = values
        self.writes = []
        self.fail_writes = fail_writes

    @property
    def sheet_url(self) -> str:
        return "https://docs.google.com/spreadsheets/d/sheet-abc/edit"

    def read_rows(self, range_spec: str = "A:I"):
        return [list(r) for r in self.values]

    def write_range(self, range_spec, values) -> None:
        if self.fail_writes:
            raise SheetsApiError("write denied", upstream_status=403)
        self.writes.append((range_spec, [list(v) for v in values]))


class FakeStore(IAttendanceStore):
    def __init__(self, persisted=(), fail_rows=(), locked=False):
        self.rows = {(SOURCE, n): None for n in persisted}
        self.fail_rows = set(fail_rows)
        self.insert_calls = []
        self.deleted = False
        self.locked = locked

    def fetch_synced_row_numbers(self, source_id):
        return {n for (s, n) in self.rows if s == source_id}

    def insert_records(self, records):
        self.insert_calls.append([r.sheet_row_number for r in records])
        if any(r.sheet_row_number in self.fail_rows for r in records):
            raise DatastoreError("insert rejected", upstream_status=500)
        inserted = 0
        for r in records:
            key = (r.sheet_source_id, r.sheet_row_number)
            if key not in self.rows:
                self.rows[key] = r
                inserted += 1
        return inserted

    def fetch_by_date_range(self, start, end):
        return []

    def count_records(self, source_id):
        return len(self.fetch_synced_row_numbers(source_id))

    def delete_source_records(self, source_id):
        keys = [k for k in self.rows if k[0] == source_id]
        for k in keys:
            del self.rows[k]
        self.deleted = True
        return len(keys)

    @contextmanager
    def run_lock(self, source_id):
        yield not self.locked


def _config(batch_size=10) -> SyncConfig:
    return SyncConfig(
        sheet_id=SOURCE,
        sheet_name="",
        google=GoogleCredentials(client_email="svc@example.iam.gserviceaccount.com", private_key="k"),
        datastore_backend="postgrest",
        datastore_url="https://db.example.com",
        datastore_api_key="key",
        datastore_table="employee_attendance",
        database_url="",
        source_id=SOURCE,
        batch_size=batch_size,
        batch_pause_s=0.0,
        max_attempts=1,
    )


def _use_case(sheets, store, batch_size=10) -> InboundSyncUseCase:
    return InboundSyncUseCase(
        config=_config(batch_size),
        sheets=sheets,
        store=store,
        executor=BatchExecutor(policy=RetryPolicy.no_retry(), pause_s=0.0, sleep=lambda s: None),
    )


# =========================================================================
# Funciones puras
# =========================================================================


def test_row_to_record_normalizes_fields() -> None:
    row = SpreadsheetRow.from_values(5, _row())
    record, reason = row_to_record(row, source_id=SOURCE, synced_at=SYNCED_AT)

    assert reason is None
    assert record.date == "2025-12-16"
    assert record.first_in == "09:05:00"
    assert record.last_out == "18:00:00"
    assert record.late_login is None
    assert record.sheet_row_number == 5
    assert record.sheet_source_id == SOURCE
    assert record.sheet_synced_at == SYNCED_AT


def test_row_to_record_accepts_sheets_default_time_format() -> None:
    row = SpreadsheetRow.from_values(2, ["2025-01-05", "E1", "Ana", "", "9:51:00 PM", "25:30 pm"])
    record, reason = row_to_record(row, source_id=SOURCE, synced_at=SYNCED_AT)

    assert reason is None
    assert record.first_in == "21:51:00"
    # Hora fuera de rango se degrada a None en vez de romper el batch
    assert record.last_out is None


@pytest.mark.parametrize(
    "values",
    [
        _row(emp_id="   "),
        _row(name=""),
        _row(day=""),
        _row(day="someday"),
        ["2025-12-16", "E1"],
    ],
)
def test_row_to_record_rejects_incomplete_rows(values) -> None:
    record, reason = row_to_record(SpreadsheetRow.from_values(2, values), source_id=SOURCE, synced_at=SYNCED_AT)
    assert record is None
    assert reason


def test_plan_skips_persisted_rows_by_position() -> None:
    values = [SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2"), _row(emp_id="E3")]

    plan = plan_inbound_sync(values, {2, 3}, source_id=SOURCE, synced_at=SYNCED_AT)

    assert plan.total_rows == 3
    assert plan.already_synced == [2, 3]
    assert [r.sheet_row_number for r in plan.new_records] == [4]
    assert plan.new_records[0].employee_id == "E3"


def test_plan_on_empty_sheet() -> None:
    assert plan_inbound_sync([], set(), source_id=SOURCE).total_rows == 0
    assert plan_inbound_sync([SHEET_HEADERS], set(), source_id=SOURCE).new_records == []


def test_status_column_covers_every_data_row() -> None:
    values = [SHEET_HEADERS, _row(), _row(name=""), _row(), _row()]
    plan = plan_inbound_sync(values, {2}, source_id=SOURCE, synced_at=SYNCED_AT)

    statuses = build_status_column(plan, failed_rows={5})

    assert statuses == {
        2: RowStatus.SAVED,
        3: RowStatus.INVALID,
        4: RowStatus.SAVED,
        5: RowStatus.FAILED,
    }


# =========================================================================
# Caso de uso completo
# =========================================================================


def test_inserts_only_new_row_and_marks_all_rows() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2"), _row(emp_id="E3")])
    store = FakeStore(persisted={2, 3})

    result = _use_case(sheets, store).execute()

    assert store.insert_calls == [[4]]
    assert result.new_records == 1
    assert result.already_synced == 2
    assert result.total_in_datastore == 3
    assert result.success and not result.partial
    assert sheets.writes == [("I2:I4", [["✅ Saved"], ["✅ Saved"], ["✅ Saved"]])]


def test_second_run_is_idempotent() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2")])
    store = FakeStore()
    use_case = _use_case(sheets, store)

    first = use_case.execute()
    second = use_case.execute()

    assert first.new_records == 2
    assert second.new_records == 0
    assert second.already_synced == 2
    assert store.insert_calls == [[2, 3]]
    assert second.success


def test_invalid_rows_are_reported_and_retried_next_run() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id=""), _row(emp_id="E2")])
    store = FakeStore()

    result = _use_case(sheets, store).execute()

    assert result.invalid_rows == [2]
    assert result.new_records == 1
    assert sheets.writes[0][1] == [["⚠️ Invalid"], ["✅ Saved"]]
    assert result.to_details()["invalidRows"] == 1
    # La fila invalida no quedo persistida: se reevalua en la siguiente corrida
    assert 2 not in store.fetch_synced_row_numbers(SOURCE)


def test_failed_batch_is_isolated_and_marked_failed() -> None:
    values = [SHEET_HEADERS] + [_row(emp_id=f"E{i}") for i in range(5)]
    sheets = FakeSheets(values)
    store = FakeStore(fail_rows={4})

    result = _use_case(sheets, store, batch_size=2).execute()

    assert store.insert_calls == [[2, 3], [4, 5], [6]]
    assert result.new_records == 3
    assert result.failed_rows == [4, 5]
    assert result.success and result.partial
    assert result.to_details()["failedRows"] == [4, 5]
    assert sheets.writes[0][1] == [["✅ Saved"], ["✅ Saved"], ["❌ Failed"], ["❌ Failed"], ["✅ Saved"]]


def test_all_batches_failed_is_not_success() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id="E1")])
    store = FakeStore(fail_rows={2})

    result = _use_case(sheets, store).execute()

    assert result.new_records == 0
    assert result.failed_rows == [2]
    assert not result.success


def test_nothing_to_insert_is_success() -> None:
    sheets = FakeSheets([SHEET_HEADERS])
    result = _use_case(sheets, FakeStore()).execute()

    assert result.success
    assert result.total_rows == 0
    assert sheets.writes == []


def test_full_resync_deletes_and_reimports() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2")])
    store = FakeStore(persisted={2, 3, 9})

    result = _use_case(sheets, store).execute(full_resync=True)

    assert store.deleted
    assert result.new_records == 2
    assert result.already_synced == 0
    assert result.total_in_datastore == 2


def test_busy_lock_skips_run() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row()])
    store = FakeStore(locked=True)

    result = _use_case(sheets, store).execute()

    assert not result.lock_acquired
    assert result.success
    assert store.insert_calls == []
    assert sheets.writes == []


def test_status_write_failure_propagates() -> None:
    sheets = FakeSheets([SHEET_HEADERS, _row()], fail_writes=True)

    with pytest.raises(SheetsApiError):
        _use_case(sheets, FakeStore()).execute()


def test_count_failure_reports_null_total() -> None:
    class _NoCountStore(FakeStore):
        def count_records(self, source_id):
            raise DatastoreError("count failed")

    sheets = FakeSheets([SHEET_HEADERS, _row()])
    result = _use_case(sheets, _NoCountStore()).execute()

    assert result.new_records == 1
    assert result.total_in_datastore is None
    assert result.to_details()["totalInDatastore"] is None


def test_rows_persisted_by_concurrent_run_are_not_counted_as_new() -> None:
    class _RacingStore(FakeStore):
        def insert_records(self, records):
            # Otra corrida guardo la fila 2 entre la lectura y el insert
            self.rows[(SOURCE, 2)] = None
            return super().insert_records(records)

    sheets = FakeSheets([SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2")])
    store = _RacingStore()

    result = _use_case(sheets, store).execute()

    assert result.new_records == 1
    assert result.conflict_skipped == 1
    assert result.total_in_datastore == 2
    assert result.success and not result.partial
    assert sheets.writes[0][1] == [["✅ Saved"], ["✅ Saved"]]


def test_conflict_only_batch_with_failed_batch_is_partial() -> None:
    class _AllConflictsStore(FakeStore):
        def insert_records(self, records):
            super().insert_records(records)
            return 0

    values = [SHEET_HEADERS, _row(emp_id="E1"), _row(emp_id="E2")]
    store = _AllConflictsStore(fail_rows={3})

    result = _use_case(FakeSheets(values), store, batch_size=1).execute()

    assert result.new_records == 0
    assert result.failed_rows == [3]
    assert result.success and result.partial
