"""FastAPI dependencies that hand out record-store sessions.

Lookups (program, day meals, workouts, stored results) depend on
`get_db_read`; quiz completion, preference changes, completion toggles and
override writes depend on `get_db_write`.
"""

from .database import ReadSessionLocal, WriteSessionLocal, open_session


def get_db_write():
    yield from open_session(WriteSessionLocal)


def get_db_read():
    yield from open_session(ReadSessionLocal)
