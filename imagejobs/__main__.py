"""Run the job status service with uvicorn."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
  host = os.getenv("IMAGEJOBS_HOST", "127.0.0.1")
  port = int(os.getenv("IMAGEJOBS_PORT", "8000"))
  # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes the store.
  uvicorn.run("imagejobs.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
  main()
