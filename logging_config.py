"""
Logging setup for the TaskDesk API.

Every record carries the request id, the caller's user id and role, which the
request middleware stores in context variables. Production and the log file
get one JSON object per line; local runs get a coloured single-line format.
"""

import logging
import logging.handlers
import json
import os
from datetime import datetime, timezone
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_var: ContextVar[str] = ContextVar("user_id", default="-")
role_var: ContextVar[str] = ContextVar("role", default="-")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Libraries that log every socket event at DEBUG
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "motor": logging.WARNING,
    "pymongo": logging.WARNING,
}


def _request_context() -> dict:
    return {
        "request_id": request_id_var.get("-"),
        "user_id": user_id_var.get("-"),
        "role": role_var.get("-"),
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra={"data": {...}}` lands under "data"."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **_request_context(),
            "message": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """Readable coloured lines for a local terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        ctx = _request_context()
        line = (
            f"{color}{record.levelname:<7}{self.RESET} {record.name} "
            f"[req={ctx['request_id']} user={ctx['user_id']} role={ctx['role']}] "
            f"{record.getMessage()}"
        )
        data = getattr(record, "data", None)
        if data:
            line += f"  | data={data}"
        if record.exc_info and record.exc_info[0] is not None:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def _file_handler() -> logging.Handler:
    log_dir = os.path.join(os.path.dirname(__file__), "logs")
    os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, "app.log"),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging():
    """Configure the root logger. Safe to call again on reload."""
    env = os.getenv("ENV", "development").lower()
    default_level = "DEBUG" if env == "development" else "INFO"
    log_level = os.getenv("LOG_LEVEL", default_level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(JSONFormatter() if env == "production" else DevFormatter())
    root_logger.addHandler(console)

    # Test runs stay off the disk
    file_handler = None
    if env != "testing":
        file_handler = _file_handler()
        root_logger.addHandler(file_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    get_logger("logging").info(
        f"Logging ready | env={env} level={log_level} file={getattr(file_handler, 'baseFilename', None)}"
    )


def get_logger(name: str) -> logging.Logger:
    """Child of the "taskdesk" logger, e.g. taskdesk.task_lifecycle."""
    return logging.getLogger(f"taskdesk.{name}")
