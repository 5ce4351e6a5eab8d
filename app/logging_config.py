from __future__ import annotations

import json
import logging
import logging.config

from app.config import Settings


class StructuredFormatter(logging.Formatter):
    """Plain text log line with any ``extra=`` fields appended as JSON."""

    RESERVED_ATTRS = frozenset(
        {
            "name", "msg", "args", "created", "filename", "funcName", "levelname",
            "levelno", "lineno", "module", "msecs", "pathname", "process",
            "processName", "relativeCreated", "thread", "threadName", "exc_info",
            "exc_text", "stack_info", "asctime", "message", "taskName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        base_message = super().format(record)
        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.RESERVED_ATTRS
        }
        if extra_fields:
            return f"{base_message} | {json.dumps(extra_fields, default=str)}"
        return base_message


def configure_logging(settings: Settings) -> None:
    """Install the console handler once; later calls are no-ops."""

    root_logger = logging.getLogger()
    if any(getattr(h, "name", None) == "job_match_console" for h in root_logger.handlers):
        return

    level = (settings.log_level or "INFO").upper()
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": "app.logging_config.StructuredFormatter",
                "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "job_match_console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {
            "level": level,
            "handlers": ["job_match_console"],
        },
    }
    logging.config.dictConfig(config)
