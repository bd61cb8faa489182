from __future__ import annotations

import itertools
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the troq package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from troq.core import config as core_config  # noqa: E402
from troq.core.rate_limiter import reset_limits  # noqa: E402
from troq.db import create_tables  # noqa: E402
from troq.db import session as db_session  # noqa: E402
from troq.repositories import json_storage, sql_repository  # noqa: E402
from troq.repositories.json_storage import JSONRepository  # noqa: E402
from troq.repositories.sql_repository import SQLRepository  # noqa: E402


@pytest.fixture()
def clock(monkeypatch):
    """Deterministic creation timestamps, one second apart."""
    start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    ticks = itertools.count()

    def fake_now() -> datetime:
        return start + timedelta(seconds=next(ticks))

    monkeypatch.setattr(json_storage, "utcnow", fake_now)
    monkeypatch.setattr(sql_repository, "utcnow", fake_now)
    return fake_now


@pytest.fixture()
def json_repo(tmp_path, clock):
    return JSONRepository(tmp_path / "database.json")


@pytest.fixture()
def sql_repo(tmp_path, monkeypatch, clock):
    """Temporary SQLite database with fresh settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.reset_engine()

    engine = db_session.get_engine()
    create_tables.drop_all(engine)
    create_tables.create_all(engine)

    yield SQLRepository()

    create_tables.drop_all(engine)
    db_session.reset_engine()
    core_config.get_settings.cache_clear()


@pytest.fixture(params=["json", "sql"])
def repo(request):
    """Runs the test once per storage backend."""
    return request.getfixturevalue(f"{request.param}_repo")


class FakeMedia:
    """Stands in for MediaService; ``url=None`` simulates a failed upload."""

    def __init__(self, url: str | None = "https://media.example/img.png") -> None:
        self.url = url
        self.calls: list[tuple[str, str]] = []

    def upload(self, upload, *, folder: str):
        if upload is None:
            return None
        self.calls.append((upload.filename, folder))
        return self.url


@pytest.fixture()
def media():
    return FakeMedia()


@pytest.fixture(autouse=True)
def _clean_rate_limits():
    reset_limits()
    yield
    reset_limits()
