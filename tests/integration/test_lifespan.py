"""Startup and shutdown handling of the job status store."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI

from imagejobs.config import get_settings
from imagejobs.core.lifespan import lifespan
from imagejobs.jobs.models import JobStatus, Progress
from imagejobs.storage.errors import StorageUnavailable
from imagejobs.storage.status_store import JobStatusStore


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
  monkeypatch.setenv("IMAGEJOBS_LOG_DIR", str(tmp_path / "logs"))
  monkeypatch.setenv("IMAGEJOBS_DB_LOCK_TIMEOUT_SECONDS", "0.1")
  # Leave the test runner's logging handlers alone.
  monkeypatch.setattr("imagejobs.core.lifespan._initialize_logging", lambda settings: None)
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


async def _seed_jobs(db_dir: Path) -> None:
  async with await JobStatusStore.open(db_dir) as store:
    await store.mark_queued("text-to-image", "finished")
    await store.mark_done("text-to-image", "finished")
    await store.mark_queued("text-to-image", "queued")
    await store.mark_queued("text-to-image", "running")
    await store.mark_in_progress("text-to-image", "running", Progress(current_sample=1, progress_value=0.3, total_samples=1))


@pytest.mark.anyio
async def test_lifespan_opens_and_closes_store(monkeypatch: pytest.MonkeyPatch, db_dir: Path) -> None:
  monkeypatch.setenv("IMAGEJOBS_DB_DIR", str(db_dir))
  app = FastAPI()

  async with lifespan(app):
    store = app.state.job_store
    assert isinstance(store, JobStatusStore)
    assert store.is_open
    await store.mark_queued("text-to-image", "abc")

  assert app.state.job_store is None
  assert not store.is_open


@pytest.mark.anyio
async def test_lifespan_purges_incomplete_jobs_when_enabled(monkeypatch: pytest.MonkeyPatch, db_dir: Path) -> None:
  await _seed_jobs(db_dir)
  monkeypatch.setenv("IMAGEJOBS_DB_DIR", str(db_dir))
  monkeypatch.setenv("IMAGEJOBS_DELETE_INCOMPLETE", "true")
  app = FastAPI()

  async with lifespan(app):
    records = await app.state.job_store.list_records()

  assert [(key.job_id, record.status) for key, record in records] == [("finished", JobStatus.COMPLETE)]


@pytest.mark.anyio
async def test_lifespan_keeps_incomplete_jobs_by_default(monkeypatch: pytest.MonkeyPatch, db_dir: Path) -> None:
  await _seed_jobs(db_dir)
  monkeypatch.setenv("IMAGEJOBS_DB_DIR", str(db_dir))
  monkeypatch.delenv("IMAGEJOBS_DELETE_INCOMPLETE", raising=False)
  app = FastAPI()

  async with lifespan(app):
    records = await app.state.job_store.list_records()

  assert len(records) == 3


@pytest.mark.anyio
async def test_lifespan_refuses_to_start_when_store_is_locked(monkeypatch: pytest.MonkeyPatch, store: JobStatusStore, db_dir: Path) -> None:
  monkeypatch.setenv("IMAGEJOBS_DB_DIR", str(db_dir))
  app = FastAPI()

  with pytest.raises(StorageUnavailable):
    async with lifespan(app):
      pytest.fail("lifespan must not yield without a store")
