"""Storage interfaces for image generation job status."""

from __future__ import annotations

from typing import Protocol

from imagejobs.jobs.models import JobKey, JobRecord, Progress


class JobStatusRepository(Protocol):
  """Repository contract for job status persistence."""

  async def mark_queued(self, job_type: str, job_id: str) -> None:
    """Write a fresh queued record, replacing any previous one."""

  async def mark_in_progress(self, job_type: str, job_id: str, progress: Progress) -> None:
    """Record progress for one sample of a queued or running job."""

  async def mark_done(self, job_type: str, job_id: str) -> None:
    """Mark a job complete."""

  async def get_status(self, job_type: str, job_id: str) -> JobRecord | None:
    """Fetch a job record, or None when the job is unknown."""

  async def list_records(self) -> list[tuple[JobKey, JobRecord]]:
    """Return every record ordered by key."""

  async def purge_incomplete(self) -> int:
    """Delete every record that is not complete and return how many were removed."""
