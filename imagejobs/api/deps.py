"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from imagejobs.storage.status_store import JobStatusStore


def get_job_store(request: Request) -> JobStatusStore:
  """Return the job status store opened by the application lifespan."""
  store = getattr(request.app.state, "job_store", None)
  if store is None:
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Job status store is not ready.")
  return store
