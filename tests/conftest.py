"""Shared fixtures: throwaway SQLite database, schedule files, API client."""

import json

import pytest
from pydantic import SecretStr

from core.settings import settings
from db.base import close_db, init_db

API_TOKEN = "test-pipeline-token"


@pytest.fixture
def database(tmp_path, monkeypatch):
    """A fresh SQLite file bound to the model proxy."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setattr(settings, "database_url", url)
    init_db(url)
    yield
    close_db()


SCHEDULE = {
    "2025-01-06": ["BOS", "LAL"],
    "2025-01-08": ["BOS", "NYK"],
    "2025-01-13": ["BOS"],
    "2025-01-15": ["LAL", "NYK"],
    "2025-03-24": ["BOS", "LAL"],
    "2025-03-31": ["LAL"],
    "2025-04-02": ["NYK", "LAL"],
}

WEEKS = {
    "weeks": {
        "1": {"start": "2025-01-06", "end": "2025-01-12", "label": "Jan 6 - Jan 12"},
        "2": {"start": "2025-01-13", "end": "2025-01-19", "label": "Jan 13 - Jan 19"},
    }
}

PLAYOFFS = {
    "weeks": {
        "21": {"start": "2025-03-24", "end": "2025-03-30", "label": "Mar 24 - Mar 30"},
        "22": {"start": "2025-03-31", "end": "2025-04-06", "label": "Mar 31 - Apr 6"},
    }
}


@pytest.fixture
def schedule_dir(tmp_path):
    """Directory holding schedule.json, weeks.json and playoffs.json."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "schedule.json").write_text(json.dumps(SCHEDULE))
    (data_dir / "weeks.json").write_text(json.dumps(WEEKS))
    (data_dir / "playoffs.json").write_text(json.dumps(PLAYOFFS))
    return data_dir


@pytest.fixture
def client(database, schedule_dir, monkeypatch):
    """TestClient over the app, bound to the test database and schedule files."""
    from fastapi.testclient import TestClient

    from api.v1.schedule import get_schedule_service
    from main import app
    from services.schedule_service import ScheduleService

    monkeypatch.setattr(settings, "pipeline_api_token", SecretStr(API_TOKEN))
    app.dependency_overrides[get_schedule_service] = lambda: ScheduleService(schedule_dir)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}
