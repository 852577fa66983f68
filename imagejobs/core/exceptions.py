import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from imagejobs.storage.errors import InvalidJobKey, StorageIOError

logger = logging.getLogger("uvicorn.error")


def _error_payload(detail: Any) -> dict[str, Any]:
  """Build the error body shared by every handler."""
  return {"detail": detail}


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  """Catch unhandled errors without leaking internals to callers."""
  logger.error("Global exception path=%s error_type=%s", request.url.path, type(exc).__name__, exc_info=True)
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload("Internal Server Error"))


async def storage_io_exception_handler(request: Request, exc: StorageIOError) -> JSONResponse:
  """Surface a failed durable read or write as a server error for this request only."""
  logger.error("Job storage failure path=%s method=%s", request.url.path, request.method, exc_info=True)
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload("Job storage unavailable"))


async def invalid_job_key_handler(request: Request, exc: InvalidJobKey) -> JSONResponse:
  """Reject job identifiers that cannot form a key."""
  logger.warning("Invalid job key path=%s detail=%s", request.url.path, exc)
  return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_payload(str(exc)))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
  """Handle HTTPExceptions, hiding 5xx details from callers."""
  if exc.status_code >= 500:
    logger.error("HTTPException path=%s status_code=%s detail=%s", request.url.path, exc.status_code, exc.detail, exc_info=True)
    return JSONResponse(status_code=exc.status_code, content=_error_payload("Internal Server Error"))

  return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.detail), headers=getattr(exc, "headers", None))
