"""Error taxonomy for the job status store."""

from __future__ import annotations


class JobStoreError(Exception):
  """Base class for every error raised by the job status store."""


class StorageUnavailable(JobStoreError):
  """The database directory cannot be opened or is held by another process."""


class StorageIOError(JobStoreError):
  """A durable read or write failed after the store was opened."""


class InvalidJobKey(JobStoreError, ValueError):
  """A job type or id is empty or contains the key separator."""


class RecordNotFound(JobStoreError, LookupError):
  """A mutation targeted a job that was never queued."""

  def __init__(self, key: str) -> None:
    super().__init__(f"No job record for {key!r}; mark it queued first.")
    self.key = key


class IndexOutOfRange(JobStoreError, IndexError):
  """A progress update referenced a sample outside the job's slots."""

  def __init__(self, key: str, current_sample: int, slot_count: int) -> None:
    super().__init__(f"Sample {current_sample} is outside 1..{slot_count} for {key!r}.")
    self.key = key
    self.current_sample = current_sample
    self.slot_count = slot_count


class SampleCountMismatch(JobStoreError):
  """A progress update disagreed with the sample count fixed by the first update."""

  def __init__(self, key: str, expected: int, received: int) -> None:
    super().__init__(f"Job {key!r} has {expected} samples, progress update reported {received}.")
    self.key = key
    self.expected = expected
    self.received = received


class InvalidStatusTransition(JobStoreError):
  """A mutation would move a job's status backwards."""

  def __init__(self, key: str, current: str, requested: str) -> None:
    super().__init__(f"Job {key!r} cannot move from {current} to {requested}.")
    self.key = key
    self.current = current
    self.requested = requested
