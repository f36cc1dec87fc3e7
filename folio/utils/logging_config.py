import logging
import logging.config
import os
import re
import sys
from pathlib import Path
from typing import Any


class HTTPStatusFilter(logging.Filter):
    """Adjusts the level of uvicorn.access records from the HTTP status at
    the end of the message (4xx: WARNING, 5xx: ERROR) and drops health
    checks."""

    STATUS_CODE_PATTERN = re.compile(r"\b(\d{3})\b")
    HEALTH_ENDPOINT_PATTERN = re.compile(r'"GET /v1/health HTTP/\d\.\d"')

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True

        message = record.getMessage()
        if self.HEALTH_ENDPOINT_PATTERN.search(message):
            return False

        if codes := self.STATUS_CODE_PATTERN.findall(message):
            status_code = int(codes[-1])
            if 400 <= status_code < 500:
                record.levelno = logging.WARNING
                record.levelname = "WARNING"
            elif 500 <= status_code < 600:
                record.levelno = logging.ERROR
                record.levelname = "ERROR"

        return True


log_level = os.environ.get("FOLIO_LOG_LEVEL", "INFO").upper()
log_console_formatter = os.environ.get(
    "FOLIO_LOG_CONSOLE_FORMATTER", "colored"
).lower()  # colored or json

log_dir = Path(os.environ.get("FOLIO_LOG_DIR", Path.cwd() / "logs"))
log_file = log_dir / "folio.log"


def build_log_config(
    level: str = log_level,
    console_formatter: str = log_console_formatter,
    filename: Path = log_file,
) -> dict[str, Any]:
    handler_names = ["console", "file"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "http_status_filter": {
                "()": HTTPStatusFilter,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": "colorlog.ColoredFormatter",
                "format": "%(asctime)s - %(log_color)s%(levelname)s%(reset)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "log_colors": {
                    "DEBUG": "white",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "bold_red",
                },
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "rename_fields": {
                    "asctime": "time",
                    "levelname": "level",
                    "name": "logger",
                },
            },
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "default",
                "filename": filename,
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "filters": ["http_status_filter"],
                "level": level,
            },
            "console": {
                "class": "logging.StreamHandler",
                "formatter": console_formatter,
                "stream": sys.stdout,
                "filters": ["http_status_filter"],
                "level": level,
            },
        },
        "loggers": {
            "": {  # Root logger
                "handlers": handler_names,
                "level": level,
            },
            "uvicorn": {
                "handlers": handler_names,
                "level": level,
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": handler_names,
                "level": level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": handler_names,
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging() -> Path:
    if log_console_formatter not in ("colored", "json"):
        raise ValueError(
            f"FOLIO_LOG_CONSOLE_FORMATTER must be 'colored' or 'json', got '{log_console_formatter}'."
        )
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_log_config())

    logging.info(f"Logging is configured at {log_level} level.")

    return log_file
