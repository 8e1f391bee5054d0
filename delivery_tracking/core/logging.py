"""
Structured logging configuration.

Features:
- JSON logging format for production
- Order ID tracking while tracking events are dispatched
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from delivery_tracking.core.config import settings

# Set by the subscription hub for the duration of an event dispatch
order_id_var: ContextVar[str] = ContextVar("order_id", default="")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        order_id = order_id_var.get()
        if order_id:
            log_data["order_id"] = order_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        order_id = order_id_var.get()
        context = f"[order:{order_id[:12]}]" if order_id else ""

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = (
            f"{timestamp} {record.levelname:8} {context:20} "
            f"{record.name}:{record.funcName}:{record.lineno} - {record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: Optional[str] = None,
    json_format: bool = False,
) -> None:
    """
    Configure tracking subsystem logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to
            settings.LOG_LEVEL
        json_format: Use JSON format (for production)
    """
    level = level or settings.LOG_LEVEL

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if json_format or not settings.DEBUG:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(HumanFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    loggers_config = {
        "delivery_tracking": level,
        "httpx": "WARNING",
        "socketio": "WARNING",
        "engineio": "WARNING",
    }

    for logger_name, logger_level in loggers_config.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, logger_level.upper()))
