"""SQLite-backed job status store using SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from imagejobs.core.database import Base, create_db_engine, create_session_factory
from imagejobs.jobs.locks import KeyedLocks
from imagejobs.jobs.models import JobKey, JobRecord, JobStatus, Progress
from imagejobs.schema.jobs import JobEntry
from imagejobs.storage.errors import InvalidJobKey, RecordNotFound, StorageIOError, StorageUnavailable
from imagejobs.storage.jobs_repo import JobStatusRepository

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
# Stay below SQLite's bound-parameter limit when deleting many keys at once.
DELETE_CHUNK_SIZE = 500


def _decode_entry(raw_key: str, value: object) -> tuple[JobKey, JobRecord]:
  """Rebuild a stored row, reporting unreadable rows as storage failures."""
  try:
    return JobKey.decode(raw_key), JobRecord.from_dict(value)  # type: ignore[arg-type]
  except (KeyError, TypeError, ValueError) as exc:
    logger.error("Unreadable job record key=%s error_type=%s", raw_key, type(exc).__name__)
    raise StorageIOError(f"Stored job record {raw_key!r} is unreadable: {exc}") from exc


class JobStatusStore(JobStatusRepository):
  """Persist job status records in an embedded, exclusively locked database."""

  def __init__(self, engine: AsyncEngine, directory_path: Path) -> None:
    self._engine: AsyncEngine | None = engine
    self._session_factory = create_session_factory(engine)
    self._directory_path = directory_path
    self._locks = KeyedLocks()

  @classmethod
  async def open(cls, directory_path: str | Path, *, lock_timeout_seconds: float = 5.0, echo: bool = False) -> JobStatusStore:
    """Open the store rooted at ``directory_path``, creating it when absent."""
    path = Path(directory_path)
    try:
      path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
      raise StorageUnavailable(f"Cannot create job database directory {path}: {exc}") from exc

    engine = create_db_engine(path, busy_timeout_seconds=lock_timeout_seconds, echo=echo)
    try:
      async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
        # Writing the header takes the exclusive file lock now instead of on the first job write.
        await connection.execute(text(f"PRAGMA user_version = {SCHEMA_VERSION}"))
    except (SQLAlchemyError, OSError) as exc:
      await engine.dispose()
      logger.error("Job status store unavailable path=%s error_type=%s", path, type(exc).__name__, exc_info=True)
      raise StorageUnavailable(f"Cannot open job database at {path}: {exc}") from exc

    logger.info("Job status store opened path=%s", path)
    return cls(engine, path)

  @property
  def directory_path(self) -> Path:
    return self._directory_path

  @property
  def is_open(self) -> bool:
    return self._engine is not None

  async def close(self) -> None:
    """Dispose the engine and release the database lock."""
    if self._engine is None:
      return
    engine, self._engine = self._engine, None
    await engine.dispose()
    logger.info("Job status store closed path=%s", self._directory_path)

  async def __aenter__(self) -> JobStatusStore:
    return self

  async def __aexit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, traceback: TracebackType | None) -> None:
    await self.close()

  @asynccontextmanager
  async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
    """Yield a session, translating driver failures into StorageIOError."""
    if self._engine is None:
      raise StorageIOError(f"Job status store is closed; cannot {operation}.")
    try:
      async with self._session_factory() as session:
        yield session
    except SQLAlchemyError as exc:
      logger.error("Job store operation failed operation=%s error_type=%s", operation, type(exc).__name__, exc_info=True)
      raise StorageIOError(f"Job store {operation} failed: {exc}") from exc

  async def mark_queued(self, job_type: str, job_id: str) -> None:
    key = JobKey(job_type, job_id)
    record = JobRecord.queued(key)
    async with self._locks.hold(key):
      async with self._session("mark_queued") as session, session.begin():
        # Re-queueing an existing key resets it.
        await session.merge(JobEntry(key=key.encode(), value=record.to_dict()))
    logger.debug("Job queued key=%s", key)

  async def mark_in_progress(self, job_type: str, job_id: str, progress: Progress) -> None:
    key = JobKey(job_type, job_id)
    async with self._locks.hold(key):
      async with self._session("mark_in_progress") as session, session.begin():
        row = await session.get(JobEntry, key.encode())
        if row is None:
          raise RecordNotFound(key.encode())
        _, record = _decode_entry(row.key, row.value)
        record.apply_progress(key, progress)
        row.value = record.to_dict()
    logger.debug("Job progress key=%s sample=%d/%d progress=%s", key, progress.current_sample, progress.total_samples, progress.progress_value)

  async def mark_done(self, job_type: str, job_id: str) -> None:
    key = JobKey(job_type, job_id)
    async with self._locks.hold(key):
      async with self._session("mark_done") as session, session.begin():
        row = await session.get(JobEntry, key.encode())
        if row is None:
          raise RecordNotFound(key.encode())
        _, record = _decode_entry(row.key, row.value)
        if not record.mark_complete():
          return
        row.value = record.to_dict()
    logger.debug("Job complete key=%s", key)

  async def get_status(self, job_type: str, job_id: str) -> JobRecord | None:
    try:
      key = JobKey(job_type, job_id)
    except InvalidJobKey:
      # Malformed keys are never stored.
      return None
    async with self._session("get_status") as session:
      row = await session.get(JobEntry, key.encode())
      if row is None:
        return None
      return _decode_entry(row.key, row.value)[1]

  async def list_records(self) -> list[tuple[JobKey, JobRecord]]:
    async with self._session("list_records") as session:
      rows = (await session.execute(select(JobEntry).order_by(JobEntry.key))).scalars().all()
      return [_decode_entry(row.key, row.value) for row in rows]

  async def purge_incomplete(self) -> int:
    """Delete every non-complete record in one transaction.

    Only call this before request handling starts: the scan is not coordinated
    with concurrent writers.
    """
    async with self._session("purge_incomplete") as session, session.begin():
      rows = (await session.execute(select(JobEntry.key, JobEntry.value).order_by(JobEntry.key))).all()
      # Anything without a COMPLETE status, including unreadable values, can never finish.
      stale = [key for key, value in rows if not isinstance(value, dict) or value.get("status") != JobStatus.COMPLETE.value]
      for start in range(0, len(stale), DELETE_CHUNK_SIZE):
        await session.execute(delete(JobEntry).where(JobEntry.key.in_(stale[start : start + DELETE_CHUNK_SIZE])))
    logger.info("Purged incomplete jobs removed=%d scanned=%d", len(stale), len(rows))
    return len(stale)
