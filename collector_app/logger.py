"""
Logging setup for the collector and the uvicorn servers it runs.
"""

import json
import logging
import logging.config
import sys
from pathlib import Path

from collector_app.config import Settings

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = {
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module",
    "msecs", "message", "msg", "name", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "thread", "threadName",
    "taskName", "color_message",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers"""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "func_name": record.funcName,
            "line_no": record.lineno,
            "process_id": record.process,
            "thread_name": record.threadName,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in log_record:
                log_record[key] = value

        return json.dumps(log_record, ensure_ascii=False, default=str)


def build_logging_config(settings: Settings) -> dict:
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter_name = "json" if settings.log_json_format else "standard"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter_name,
            "stream": sys.stdout,
        },
    }
    if settings.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filename": settings.log_file,
            "maxBytes": settings.log_max_bytes,
            "backupCount": settings.log_backup_count,
            "encoding": "utf-8",
        }
    handler_names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,  # keep uvicorn's own loggers alive
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": JSONFormatter,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "collector_app": {
                "handlers": handler_names,
                "level": log_level,
                "propagate": False,
            },
            "uvicorn": {
                "handlers": handler_names,
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "INFO",
            },
            "uvicorn.access": {
                "handlers": handler_names,
                "level": "WARNING",  # log_requests already records each request
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """Apply the logging configuration"""
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))
