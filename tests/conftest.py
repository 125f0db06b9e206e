"""Shared test setup.

Points the record store and the log directory at a throwaway location
before any application module is imported, then creates the tables.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="program-engine-tests-")
os.environ.setdefault("WRITE_DATABASE_URL", "sqlite:///" + os.path.join(_TMP_DIR, "test.db"))
os.environ.setdefault("LOG_DIR", os.path.join(_TMP_DIR, "logs"))

import pytest

from database import ReadSessionLocal, WriteSessionLocal, init_db, open_session


@pytest.fixture(scope="session", autouse=True)
def setup_db():
    """Create the record-store tables once per test session."""
    init_db()


@pytest.fixture
def write_db():
    yield from open_session(WriteSessionLocal)


@pytest.fixture
def read_db():
    yield from open_session(ReadSessionLocal)
