"""
Shared test fixtures.

Provides:
  • `repo` – a seeded InMemoryRepository for async unit tests
  • `client` – a FastAPI TestClient whose repository dependency points at
    a fresh seeded InMemoryRepository (`api_repo`)

The `client` fixture runs the full lifespan so app state (activity locks)
is set up exactly as in production. Rate limiting is disabled here; the
rate-limit tests turn it back on.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tourbooking.dependencies import get_repository
from tourbooking.main import app
from tourbooking.repository import InMemoryRepository
from tests.mocks.repository import RecordingRepository, YieldingRepository, build_repository


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch):
    """Skip demo seeding and disable rate limiting for API tests."""
    monkeypatch.setattr("tourbooking.main.SEED_MOCK_DATA", False)

    from tourbooking.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)


@pytest_asyncio.fixture()
async def repo() -> InMemoryRepository:
    return await build_repository()


@pytest_asyncio.fixture()
async def recording_repo() -> RecordingRepository:
    return await build_repository(recording=True)


@pytest_asyncio.fixture()
async def yielding_repo() -> YieldingRepository:
    return await build_repository(yielding=True)


@pytest.fixture()
def api_repo() -> InMemoryRepository:
    """Seeded repository served to the TestClient."""
    return asyncio.run(build_repository())


@pytest.fixture()
def client(_test_env, api_repo: InMemoryRepository) -> TestClient:
    """
    FastAPI TestClient backed by `api_repo`.

    Uses a context manager so the lifespan runs.
    """
    app.dependency_overrides[get_repository] = lambda: api_repo

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()
