"""Per-key mutual exclusion for job record mutations."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLocks:
  """Hand out one ``asyncio.Lock`` per key, dropping it once nobody uses it."""

  def __init__(self) -> None:
    self._locks: dict[Hashable, asyncio.Lock] = {}
    self._users: dict[Hashable, int] = {}

  @asynccontextmanager
  async def hold(self, key: Hashable) -> AsyncIterator[None]:
    lock = self._locks.get(key)
    if lock is None:
      lock = asyncio.Lock()
      self._locks[key] = lock
    self._users[key] = self._users.get(key, 0) + 1
    try:
      async with lock:
        yield
    finally:
      self._users[key] -= 1
      if self._users[key] == 0:
        del self._users[key]
        del self._locks[key]

  def __len__(self) -> int:
    return len(self._locks)
