"""Bridge generation engine progress callbacks into the job status store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable

from imagejobs.jobs.models import JobKey, JobRecord, Progress
from imagejobs.storage.jobs_repo import JobStatusRepository

logger = logging.getLogger(__name__)

ProgressEvent = tuple[int, float, int] | Progress


class GenerationProgressTracker:
  """Forward one job's engine progress to the store and finish it."""

  def __init__(self, *, store: JobStatusRepository, job_type: str, job_id: str) -> None:
    self._key = JobKey(job_type, job_id)
    self._store = store
    self._updates = 0

  @property
  def key(self) -> JobKey:
    return self._key

  @property
  def updates(self) -> int:
    """Return how many progress updates were persisted."""

    return self._updates

  async def report(self, current_sample: int, progress_value: float, total_samples: int) -> None:
    """Persist a single engine progress callback."""

    progress = Progress(current_sample=current_sample, progress_value=progress_value, total_samples=total_samples)
    await self._store.mark_in_progress(self._key.job_type, self._key.job_id, progress)
    self._updates += 1

  async def complete(self) -> None:
    await self._store.mark_done(self._key.job_type, self._key.job_id)
    logger.info("Generation finished key=%s updates=%d", self._key, self._updates)

  async def follow(self, events: AsyncIterable[ProgressEvent]) -> JobRecord | None:
    """Consume an engine progress stream, then mark the job complete.

    An exception raised by the stream propagates and leaves the job
    unfinished; the startup sweep removes it on the next run.
    """

    async for event in events:
      progress = Progress.from_tuple(event)
      await self.report(progress.current_sample, progress.progress_value, progress.total_samples)
    await self.complete()
    return await self._store.get_status(self._key.job_type, self._key.job_id)
