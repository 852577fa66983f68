from __future__ import annotations

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from imagejobs.core.database import Base


class JobEntry(Base):
  __tablename__ = "job_status"

  key: Mapped[str] = mapped_column(String, primary_key=True)
  value: Mapped[dict] = mapped_column(JSON, nullable=False)
