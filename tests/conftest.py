"""
Pytest configuration and shared fixtures.

Points the app at a throwaway SQLite database before any app imports and
clears the settings cache so the test env vars are used.
"""

import os
import shutil
import tempfile

import pytest

# Fresh directory per run so parallel or crashed runs never share rows
TEST_DB_DIR = tempfile.mkdtemp(prefix="message_board_test_")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(TEST_DB_DIR, "test.db")
os.environ.setdefault("LOG_LEVEL", "INFO")

from message_board.config import get_settings  # noqa: E402
get_settings.cache_clear()

from fastapi.testclient import TestClient  # noqa: E402

from message_board.main import app  # noqa: E402
from message_board.storage import Base, engine  # noqa: E402
# Register ORM models with Base.metadata before any fixture calls create_all
import message_board.models  # noqa: E402,F401


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    # Cleanup - drop all tables after test
    Base.metadata.drop_all(bind=engine)


def pytest_sessionfinish(session, exitstatus):
    """Remove the per-run database directory."""
    engine.dispose()
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)
