"""
Tests de los eventos de arranque.
"""
from fastapi import FastAPI

from attendance_sync.core import events
from attendance_sync.core.config import Settings


def test_incomplete_sync_configuration_only_warns(monkeypatch) -> None:
    monkeypatch.setattr(events, "settings", Settings(_env_file=None, SHEET_ID=""))
    assert events.log_sync_configuration() is False


def test_complete_sync_configuration(monkeypatch) -> None:
    monkeypatch.setattr(
        events,
        "settings",
        Settings(
            _env_file=None,
            SHEET_ID="sheet-abc",
            GOOGLE_CLIENT_EMAIL="svc@example.iam.gserviceaccount.com",
            GOOGLE_PRIVATE_KEY="key",
            DATASTORE_BACKEND="postgres",
            DATABASE_URL="postgresql://u@h/db",
        ),
    )
    assert events.log_sync_configuration() is True


async def test_lifespan_runs_startup_and_shutdown(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(events, "settings", Settings(_env_file=None, SHEET_ID=""))
    monkeypatch.setattr(events, "configure_file_logging", lambda: calls.append("file_sink"))
    monkeypatch.setattr(events, "log_sync_configuration", lambda: calls.append("sync_config") or False)

    async with events.lifespan(FastAPI()):
        assert calls == ["file_sink", "sync_config"]


def test_application_starts_and_stops_with_lifespan(monkeypatch) -> None:
    from fastapi.testclient import TestClient
    from main import create_application

    calls = []
    monkeypatch.setattr(events, "configure_file_logging", lambda: calls.append("file_sink"))
    app = create_application(Settings(_env_file=None))

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200

    assert calls == ["file_sink"]
