"""Logging setup with per-request correlation IDs."""

import logging
import sys
import uuid
from contextvars import ContextVar

# Set by the request ID middleware for the lifetime of each request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s - %(message)s"

# Chatty at INFO: per-request connection lines and per-statement SQL
_LIBRARY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine", "sqlalchemy.pool")


class RequestIDFilter(logging.Filter):
    """Stamp every log record with the current request ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def generate_request_id() -> str:
    """Generate a short unique request ID."""
    return uuid.uuid4().hex[:12]


def setup_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Send service, HTTP client and database logs through one request-aware handler.

    Args:
        level: Log level name for the service loggers.
        sql_echo: Log every SQL statement at INFO. This replaces SQLAlchemy's own
            ``echo`` handler so statements carry the request ID of the query.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIDFilter())

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers = [handler]

    library_level = max(numeric_level, logging.WARNING)
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    if sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
