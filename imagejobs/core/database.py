from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

DATABASE_FILENAME = "jobs.sqlite3"


class Base(DeclarativeBase):
  pass


def database_url(directory_path: Path) -> str:
  """Build the SQLAlchemy URL of the job database inside ``directory_path``."""
  return f"sqlite+aiosqlite:///{(directory_path / DATABASE_FILENAME).as_posix()}"


def create_db_engine(directory_path: Path, *, busy_timeout_seconds: float = 5.0, echo: bool = False) -> AsyncEngine:
  """Create an engine holding one exclusive connection to the job database."""
  engine = create_async_engine(database_url(directory_path), echo=echo, pool_size=1, max_overflow=0, connect_args={"timeout": busy_timeout_seconds})

  @event.listens_for(engine.sync_engine, "connect")
  def _set_sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    # Exclusive locking keeps the file lock for the connection lifetime so a second process cannot open the store.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA locking_mode=EXCLUSIVE")
    cursor.execute("PRAGMA synchronous=FULL")
    cursor.close()

  return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
  return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
