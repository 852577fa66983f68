from __future__ import annotations

import logging

from fastapi import HTTPException, status

from imagejobs.api.models import JobStatusResponse
from imagejobs.storage.jobs_repo import JobStatusRepository

logger = logging.getLogger(__name__)

_JOB_NOT_FOUND_MSG = "Job not found."


async def get_job_status(job_type: str, job_id: str, store: JobStatusRepository) -> JobStatusResponse:
  """Fetch the status of an image generation job."""
  record = await store.get_status(job_type, job_id)
  if record is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_JOB_NOT_FOUND_MSG)
  return JobStatusResponse.from_record(record)
