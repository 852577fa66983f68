"""Minimal .env support for local runs."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

_QUOTES = ('"', "'")


def default_env_path() -> Path:
  """Return the .env path next to pyproject.toml."""

  return Path(__file__).resolve().parents[2] / ".env"


def parse_env_lines(lines: Iterable[str]) -> dict[str, str]:
  """Parse ``KEY=value`` lines, skipping comments, blanks and malformed entries."""

  values: dict[str, str] = {}
  for raw_line in lines:
    line = raw_line.strip()
    if line.startswith("export "):
      line = line.removeprefix("export ").lstrip()
    if not line or line.startswith("#") or "=" not in line:
      continue
    name, _, value = line.partition("=")
    name = name.strip()
    value = value.strip()
    if not name:
      continue
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
      value = value[1:-1]
    values[name] = value
  return values


def load_env_file(path: Path, *, override: bool = False) -> list[str]:
  """Copy a .env file into ``os.environ`` and return the names that were set."""

  if not path.is_file():
    return []

  applied: list[str] = []
  for name, value in parse_env_lines(path.read_text(encoding="utf-8").splitlines()).items():
    if not override and name in os.environ:
      continue
    os.environ[name] = value
    applied.append(name)
  return applied
