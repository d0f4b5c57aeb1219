"""
Pytest configuration for task tracker tests.

IMPORTANT: DATABASE_URL must be set before any task_tracker imports because
task_tracker/config.py validates settings and task_tracker/database.py builds
the engine at module level.
"""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

# --- Environment setup (before ANY task_tracker imports) ---
os.environ["DATABASE_URL"] = "sqlite://"

# Add project root so `from task_tracker.xxx import ...` works
sys.path.insert(0, str(Path(__file__).parent.parent))
# Add tests dir so `from factories import ...` works
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from task_tracker import lifecycle
from task_tracker.database import Base, get_db, install_sqlite_pragmas
from task_tracker.main import app

# ---------------------------------------------------------------------------
# Test engine: SQLite in-memory with StaticPool so all threads/connections
# share the same database (required for TestClient which runs in a thread).
# ---------------------------------------------------------------------------
engine = install_sqlite_pragmas(create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
))
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine
)


class FakeClock:
    """Returns a strictly increasing time, one second per call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock(monkeypatch):
    """Deterministic clock for lifecycle timestamps."""
    fake = FakeClock(datetime(2024, 6, 1, 12, 0, 0))
    monkeypatch.setattr(lifecycle, "utcnow", fake)
    return fake


@pytest.fixture
def db_session():
    """Provide a fresh SQLAlchemy session for CRUD tests."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """FastAPI TestClient with database dependency override."""
    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
