"""Logging setup for the program engine.

All module loggers live under the ``program_engine`` logger, which owns a
stream handler and a rotating file handler. The log directory and level
come from ``LOG_DIR`` and ``LOG_LEVEL`` and are read the first time a
logger is requested.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "program_engine"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FILE_NAME = "program_engine.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_DEFAULT_LOG_DIR = os.path.join(os.path.dirname(__file__), "..", "logs")


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> logging.Logger:
    """Attach the shared handlers to the ``program_engine`` logger once."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    log_dir = os.getenv("LOG_DIR", _DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root.setLevel(_level_from_env())
    root.addHandler(stream_handler)
    root.addHandler(file_handler)
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return the logger for one module, e.g. ``get_logger("services.quiz_scoring")``.

    Records propagate to the ``program_engine`` handlers, so a module
    logger never gets handlers of its own.
    """
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
