import json
import logging
import os
import time
from logging.handlers import RotatingFileHandler

FRONTEND_LOGGER_NAME = "frontend"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y"}


class LocalTimeFormatter(logging.Formatter):
    converter = time.localtime


class JsonLineFormatter(LocalTimeFormatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"))


def _build_formatter(json_enabled: bool) -> logging.Formatter:
    if json_enabled:
        return JsonLineFormatter(datefmt=LOG_DATE_FORMAT)
    return LocalTimeFormatter("%(asctime)s %(levelname)s %(name)s %(message)s", datefmt=LOG_DATE_FORMAT)


def _rotating_file(path: str, level: str, formatter: logging.Formatter) -> RotatingFileHandler:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=int(os.getenv("LOG_MAX_BYTES", "5000000")),
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", "5")),
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Send backend logs to the console and backend.log, and browser logs
    posted to /api/logs to frontend.log only."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    formatter = _build_formatter(_get_bool(os.getenv("LOG_JSON_ENABLED", "false")))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    frontend_logger = logging.getLogger(FRONTEND_LOGGER_NAME)
    frontend_logger.handlers.clear()
    frontend_logger.propagate = False
    frontend_logger.setLevel(log_level)
    frontend_logger.addHandler(console_handler)

    if _get_bool(os.getenv("LOG_FILE_ENABLED", "true"), default=True):
        root_logger.addHandler(
            _rotating_file(os.getenv("LOG_FILE_PATH", "./logs/backend.log"), log_level, formatter)
        )
        frontend_logger.addHandler(
            _rotating_file(os.getenv("FRONTEND_LOG_FILE_PATH", "./logs/frontend.log"), log_level, formatter)
        )

    logging.getLogger("uvicorn.access").handlers.clear()


def format_frontend_message(message: str, context: dict | None = None) -> str:
    if not context:
        return message
    return json.dumps({"message": message, "context": context}, separators=(",", ":"))
