"""Logging setup for the API process.

Each logger family gets its level from a dedicated Settings field, so SQL
echo or outbound HTTP chatter can be turned up without flooding the capture
and search pipeline output (and vice versa).

Call ``setup_logging()`` once from the FastAPI lifespan.
"""

import logging
import sys

from synapse_capture.config import Settings, get_settings

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"

# Settings field → logger names it controls
_LEVEL_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("log_level_sql", ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")),
    ("log_level_http", ("httpx", "httpcore")),
    ("log_level_uvicorn", ("uvicorn", "uvicorn.access", "uvicorn.error")),
    ("log_level_pipeline", ("CaptureService", "SearchService", "synapse_capture.application")),
    ("log_level_openrouter", ("synapse_capture.infrastructure.openrouter",)),
)


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-family log levels from settings."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # uvicorn installs its own handlers; tests and scripts do not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        root.addHandler(handler)

    applied: dict[str, str] = {}
    for field_name, logger_names in _LEVEL_FIELDS:
        raw = getattr(settings, field_name, "INFO")
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw))
        applied[field_name.removeprefix("log_level_")] = str(raw).upper()

    logging.getLogger(__name__).debug("Log levels: root=%s %s", settings.log_level, applied)


def _parse_level(raw: str) -> int:
    """Level name → logging constant; unknown names fall back to INFO."""
    level = logging.getLevelName(str(raw).upper())
    return level if isinstance(level, int) else logging.INFO
