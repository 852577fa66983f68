from __future__ import annotations

from fastapi import FastAPI, HTTPException

from imagejobs.api.routes import jobs
from imagejobs.core.exceptions import global_exception_handler, http_exception_handler, invalid_job_key_handler, storage_io_exception_handler
from imagejobs.core.lifespan import lifespan
from imagejobs.storage.errors import InvalidJobKey, StorageIOError

app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StorageIOError, storage_io_exception_handler)
app.add_exception_handler(InvalidJobKey, invalid_job_key_handler)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": "0.1.0"}


app.include_router(jobs.router, prefix="/v1/jobs", tags=["jobs"])
