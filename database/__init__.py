"""Record store: ORM models, engines and sessions."""

from . import models
from .database import ReadSessionLocal, WriteSessionLocal, init_db, open_session

__all__ = ["models", "init_db", "open_session", "ReadSessionLocal", "WriteSessionLocal"]
