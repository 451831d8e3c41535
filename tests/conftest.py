"""
Test configuration and fixtures for the Ribbon API.

The environment is pointed at a throwaway SQLite database and icon directory
before any `ribbon` module is imported, because settings are read at import.
"""

import os
import tempfile
from typing import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

_tmp_dir = tempfile.mkdtemp(prefix="ribbon-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["ICON_STORAGE_DIR"] = os.path.join(_tmp_dir, "icons")
os.environ["PUBLIC_ORIGIN"] = "http://testserver"
os.environ["ENVIRONMENT"] = "local"
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from ribbon.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    A fresh TestClient per test. Each client starts without cookies, so each
    test is its own browser session.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def store():
    """LinkStore over the test database, with tables created."""
    from ribbon.features.links.services.link_store import LinkStore
    from ribbon.platform.db.session import SessionLocal, init_models

    await init_models()
    return LinkStore(SessionLocal)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
