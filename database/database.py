"""Engines and session factories for the record store.

The record store holds quiz results, program assignments, meal overrides
and meal completions. Reads and writes get separate engines so a replica
can serve the dashboard reads; with the default SQLite file both URLs are
the same and one engine is shared. Meal and workout plans are not stored
here: they are loaded from the CSV datasets in ``data/fixtures``.
"""

import os
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.logger import get_logger
from .models import Base

logger = get_logger("database")

WRITE_DATABASE_URL = os.getenv("WRITE_DATABASE_URL", "sqlite:///program.db")
READ_DATABASE_URL = os.getenv("READ_DATABASE_URL", WRITE_DATABASE_URL)


def make_engine(url: str) -> Engine:
    """Create an engine; SQLite connections may be used across threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


write_engine = make_engine(WRITE_DATABASE_URL)
read_engine = write_engine if READ_DATABASE_URL == WRITE_DATABASE_URL else make_engine(READ_DATABASE_URL)

WriteSessionLocal = sessionmaker(bind=write_engine)
ReadSessionLocal = sessionmaker(bind=read_engine)


def init_db() -> None:
    """Create the record-store tables that do not exist yet."""
    Base.metadata.create_all(bind=write_engine)
    logger.info("Record store ready: %s", ", ".join(sorted(Base.metadata.tables)))


def open_session(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session from ``factory`` and close it afterwards."""
    db = factory()
    try:
        yield db
    finally:
        db.close()
