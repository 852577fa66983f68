from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from imagejobs.jobs.models import JobRecord, JobStatus


class ImageSlotResponse(BaseModel):
  """Progress of one generated image."""

  url: StrictStr
  progress: float


class JobStatusResponse(BaseModel):
  """Status payload for an image generation job."""

  status: JobStatus
  result_url: StrictStr = Field(alias="resultUrl")
  images: list[ImageSlotResponse] = Field(default_factory=list)
  model_config = ConfigDict(populate_by_name=True)

  @classmethod
  def from_record(cls, record: JobRecord) -> JobStatusResponse:
    return cls.model_validate(record.to_dict())
