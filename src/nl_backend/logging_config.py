from __future__ import annotations

import logging
import os
from typing import Optional

from .request_context import get_request_id

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    """
    Attach the current request ID (or "-") to every record as `request_id`.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def _get_log_level_from_env(env_var: str = "NEPAL_LOCATIONS_LOG_LEVEL") -> int:
    """
    Resolve the desired log level from an environment variable.

    Defaults to INFO when the variable is unset or invalid.
    """
    value = os.getenv(env_var, "INFO").upper()
    level = getattr(logging, value, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """
    Configure basic logging for the backend.

    Safe to call multiple times: when handlers already exist only the level
    is adjusted and the request ID filter is ensured on each handler.
    """
    if level is None:
        level = _get_log_level_from_env()

    root_logger = logging.getLogger()

    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        # Quiet very noisy loggers a bit by default.
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


__all__ = ["RequestIdFilter", "configure_logging"]
