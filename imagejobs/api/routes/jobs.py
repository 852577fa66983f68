import logging

from fastapi import APIRouter, Depends

from imagejobs.api.deps import get_job_store
from imagejobs.api.models import JobStatusResponse
from imagejobs.services import jobs as job_service
from imagejobs.storage.status_store import JobStatusStore

router = APIRouter()
logger = logging.getLogger("imagejobs.api.routes.jobs")


@router.get("/{job_type}/{job_id}", response_model=JobStatusResponse, response_model_by_alias=True)
async def get_job_status(  # noqa: B008
  job_type: str,
  job_id: str,
  store: JobStatusStore = Depends(get_job_store),  # noqa: B008
) -> JobStatusResponse:
  """Fetch the status and per-image progress of a generation job."""
  return await job_service.get_job_status(job_type, job_id, store)
