from __future__ import annotations

import logging

from jobtracker.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "openai", "google_genai", "multipart")

_LOG_CONFIGURED = False


def configure_logging(settings: Settings | None = None, *, force: bool = False) -> None:
    """Root level from ``LOG_LEVEL``; SQL statements only when ``SQL_ECHO`` is on."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED and not force:
        return

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.sql_echo else logging.WARNING)
    _LOG_CONFIGURED = True
