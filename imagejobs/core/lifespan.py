import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from imagejobs.core.logging import _initialize_logging
from imagejobs.storage.errors import StorageUnavailable
from imagejobs.storage.status_store import JobStatusStore


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Own the job status store for the lifetime of the service."""
  from imagejobs.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("imagejobs.core.lifespan")

  try:
    _initialize_logging(settings)
  except RuntimeError:
    # Keep serving with the default handlers when the log directory is unusable.
    logger.warning("Logging setup failed; continuing with default handlers.", exc_info=True)

  try:
    store = await JobStatusStore.open(settings.db_dir, lock_timeout_seconds=settings.db_lock_timeout_seconds, echo=settings.debug)
  except StorageUnavailable:
    # Fail fast; serving without the status store would lose job state.
    logger.error("Job status store unavailable at %s; refusing to start the service.", settings.db_dir, exc_info=True)
    raise

  try:
    # Jobs left unfinished by a previous run can never complete, so sweep them before accepting work.
    if settings.delete_incomplete:
      removed = await store.purge_incomplete()
      logger.info("Startup sweep removed %d incomplete jobs.", removed)
    app.state.job_store = store
    logger.info("Startup complete environment=%s db_dir=%s", settings.environment, settings.db_dir)
    yield
  finally:
    app.state.job_store = None
    await store.close()
