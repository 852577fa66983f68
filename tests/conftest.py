"""Shared fixtures for the job status store tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from imagejobs.api.deps import get_job_store
from imagejobs.main import app
from imagejobs.storage.status_store import JobStatusStore


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def db_dir(tmp_path: Path) -> Path:
  return tmp_path / "jobs-db"


@pytest.fixture
async def store(db_dir: Path) -> AsyncIterator[JobStatusStore]:
  job_store = await JobStatusStore.open(db_dir, lock_timeout_seconds=0.2)
  try:
    yield job_store
  finally:
    await job_store.close()


@pytest.fixture
async def async_client(store: JobStatusStore) -> AsyncIterator[AsyncClient]:
  app.dependency_overrides[get_job_store] = lambda: store
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
