"""Shared fixtures; points the application at a throwaway SQLite database."""

from __future__ import annotations

import os
import pathlib
import sys
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_DB_PATH = pathlib.Path(tempfile.gettempdir()) / f"socialprofile-tests-{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["RELATIONSHIP_CACHE_BACKEND"] = "memory"

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Return a timestamp ``minutes`` after the fixed test epoch."""

    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture()
def db_session():
    """Yield a session bound to freshly created tables."""

    from socialprofile.infrastructure import database

    database.initialize_database()
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def pytest_sessionfinish(session, exitstatus):
    from socialprofile.infrastructure import database

    database.engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()
