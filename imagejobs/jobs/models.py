"""Domain models for image generation job status records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from imagejobs.storage.errors import IndexOutOfRange, InvalidJobKey, InvalidStatusTransition, SampleCountMismatch

KEY_SEPARATOR = "/"


class JobStatus(StrEnum):
  """Lifecycle states for an image generation job."""

  QUEUED = "QUEUED"
  IN_PROGRESS = "IN_PROGRESS"
  COMPLETE = "COMPLETE"

  @property
  def is_terminal(self) -> bool:
    match self:
      case JobStatus.COMPLETE:
        return True
      case JobStatus.QUEUED | JobStatus.IN_PROGRESS:
        return False

  def can_advance_to(self, target: JobStatus) -> bool:
    """Return whether moving to ``target`` keeps the status moving forward."""

    match self:
      case JobStatus.QUEUED:
        return True
      case JobStatus.IN_PROGRESS:
        return target in (JobStatus.IN_PROGRESS, JobStatus.COMPLETE)
      case JobStatus.COMPLETE:
        return target is JobStatus.COMPLETE


@dataclass(frozen=True)
class JobKey:
  """Composite identifier of a job, serialized as ``{job_type}/{job_id}``."""

  job_type: str
  job_id: str

  def __post_init__(self) -> None:
    for name, value in (("job_type", self.job_type), ("job_id", self.job_id)):
      if not isinstance(value, str) or not value:
        raise InvalidJobKey(f"{name} must be a non-empty string.")
      if KEY_SEPARATOR in value:
        raise InvalidJobKey(f"{name} must not contain {KEY_SEPARATOR!r}: {value!r}")

  def encode(self) -> str:
    return f"{self.job_type}{KEY_SEPARATOR}{self.job_id}"

  @classmethod
  def decode(cls, raw: str) -> JobKey:
    job_type, separator, job_id = raw.partition(KEY_SEPARATOR)
    if not separator:
      raise InvalidJobKey(f"Stored key {raw!r} has no separator.")
    return cls(job_type=job_type, job_id=job_id)

  def image_url(self, index: int) -> str:
    """Return the result path of the zero-based sample ``index``."""

    return f"{self.encode()}{KEY_SEPARATOR}{index + 1}.png"

  def __str__(self) -> str:
    return self.encode()


@dataclass
class ImageSlot:
  """Progress of a single sample within a job."""

  url: str
  progress: float = 0

  def to_dict(self) -> dict[str, Any]:
    return {"url": self.url, "progress": self.progress}

  @classmethod
  def from_dict(cls, payload: dict[str, Any]) -> ImageSlot:
    return cls(url=payload["url"], progress=payload.get("progress", 0))


@dataclass
class JobRecord:
  """Persisted status of one job."""

  status: JobStatus
  result_url: str
  images: list[ImageSlot] = field(default_factory=list)

  @classmethod
  def queued(cls, key: JobKey) -> JobRecord:
    return cls(status=JobStatus.QUEUED, result_url=key.encode(), images=[])

  def allocate_images(self, key: JobKey, total_samples: int) -> None:
    """Populate the sample slots once; later calls leave them untouched."""

    if self.images:
      return
    self.images = [ImageSlot(url=key.image_url(index)) for index in range(total_samples)]

  def apply_progress(self, key: JobKey, progress: Progress) -> None:
    """Record one sample's progress, validating before anything is mutated."""

    encoded = key.encode()
    if not self.status.can_advance_to(JobStatus.IN_PROGRESS):
      raise InvalidStatusTransition(encoded, self.status.value, JobStatus.IN_PROGRESS.value)
    if self.images and progress.total_samples != len(self.images):
      raise SampleCountMismatch(encoded, len(self.images), progress.total_samples)
    slot_count = len(self.images) or progress.total_samples
    if not 1 <= progress.current_sample <= slot_count:
      raise IndexOutOfRange(encoded, progress.current_sample, max(slot_count, 0))

    self.allocate_images(key, progress.total_samples)
    self.status = JobStatus.IN_PROGRESS
    self.images[progress.current_sample - 1].progress = progress.progress_value

  def mark_complete(self) -> bool:
    """Move to COMPLETE; return False when the record was already complete."""

    if self.status.is_terminal:
      return False
    self.status = JobStatus.COMPLETE
    return True

  def to_dict(self) -> dict[str, Any]:
    """Return the wire representation exposed to API consumers."""

    return {"status": self.status.value, "resultUrl": self.result_url, "images": [slot.to_dict() for slot in self.images]}

  @classmethod
  def from_dict(cls, payload: dict[str, Any]) -> JobRecord:
    return cls(status=JobStatus(payload["status"]), result_url=payload["resultUrl"], images=[ImageSlot.from_dict(item) for item in payload.get("images") or []])


@dataclass(frozen=True)
class Progress:
  """One progress callback from the generation engine."""

  current_sample: int
  progress_value: float
  total_samples: int

  def __post_init__(self) -> None:
    for name in ("current_sample", "total_samples"):
      value = getattr(self, name)
      if isinstance(value, float) and value.is_integer():
        value = int(value)
      if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be a whole number, got {value!r}.")
      object.__setattr__(self, name, value)

  @classmethod
  def from_tuple(cls, event: tuple[int, float, int] | Progress) -> Progress:
    if isinstance(event, Progress):
      return event
    current_sample, progress_value, total_samples = event
    return cls(current_sample=current_sample, progress_value=progress_value, total_samples=total_samples)
