"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from imagejobs.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)


@dataclass(frozen=True)
class Settings:
  """Typed settings for the image job status service."""

  environment: str
  debug: bool
  db_dir: Path
  delete_incomplete: bool
  db_lock_timeout_seconds: float
  log_dir: Path
  log_max_bytes: int
  log_backup_count: int


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("IMAGEJOBS_ENV", "development").lower()
  debug = _parse_bool(os.getenv("IMAGEJOBS_DEBUG"))

  # The database directory and the startup sweep flag mirror the server's command line options.
  db_dir = Path(_optional_str(os.getenv("IMAGEJOBS_DB_DIR")) or "./data/jobs")
  delete_incomplete = _parse_bool(os.getenv("IMAGEJOBS_DELETE_INCOMPLETE"))

  db_lock_timeout_seconds = float(os.getenv("IMAGEJOBS_DB_LOCK_TIMEOUT_SECONDS", "5"))
  if db_lock_timeout_seconds < 0:
    raise ValueError("IMAGEJOBS_DB_LOCK_TIMEOUT_SECONDS must be zero or a positive number.")

  log_dir = Path(_optional_str(os.getenv("IMAGEJOBS_LOG_DIR")) or "./logs")

  log_max_bytes = int(os.getenv("IMAGEJOBS_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("IMAGEJOBS_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("IMAGEJOBS_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("IMAGEJOBS_LOG_BACKUP_COUNT must be zero or a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    db_dir=db_dir,
    delete_incomplete=delete_incomplete,
    db_lock_timeout_seconds=db_lock_timeout_seconds,
    log_dir=log_dir,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
  )
