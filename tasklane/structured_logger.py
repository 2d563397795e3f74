"""
Structured Logging Utilities for TaskLane
Provides request ID propagation and structured log output
"""

import logging
import json
from typing import Any, Dict, Optional
from contextvars import ContextVar
from datetime import datetime, UTC

# Request ID context, set by the HTTP middleware in app_factory
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class StructuredLogFormatter(logging.Formatter):
    """
    JSON formatter for structured logging with request_id propagation

    Usage:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredLogFormatter())
        logger.addHandler(handler)
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with request_id"""

        request_id = request_id_ctx.get()

        log_obj = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if request_id:
            log_obj["request_id"] = request_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Fields passed through `extra=`
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_obj:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log with automatic request_id context inclusion

    Args:
        logger: Logger instance
        level: Log level ('debug', 'info', 'warning', 'error', 'critical')
        message: Log message
        extra: Additional structured fields

    Usage:
        log_with_context(logger, 'warning', 'Access denied', {'principal': 'user:3'})
    """
    request_id = request_id_ctx.get()

    log_data = dict(extra or {})
    if request_id:
        log_data["request_id"] = request_id

    log_fn = getattr(logger, level.lower())
    log_fn(message, extra=log_data)


def setup_logging(level: str = "INFO", structured: bool = False) -> None:
    """
    Configure the root `tasklane` logger

    Args:
        level: Logging level name
        structured: Emit JSON lines via StructuredLogFormatter
    """
    root = logging.getLogger("tasklane")
    root.setLevel(level)

    if root.handlers:
        return

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
    root.addHandler(handler)
