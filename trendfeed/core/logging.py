"""Logging configuration driven by Settings.

Console lines in development, JSON lines (python-json-logger) in
production or when ``LOG_FORMAT=json``. The service logger follows
``LOG_LEVEL``; httpx and uvicorn access chatter follow
``UPSTREAM_LOG_LEVEL``.
"""
import logging
import logging.config
import sys
from typing import Dict, Any, Optional

from .settings import Settings, get_settings

CONSOLE_FORMAT = "%(asctime)s [{service}] [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s {service} %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

UPSTREAM_LOGGERS = ("httpx", "uvicorn.access")


def resolve_log_format(settings: Settings) -> str:
    """Explicit LOG_FORMAT wins, otherwise JSON only in production."""
    if settings.log_format:
        return settings.log_format.lower()
    return "json" if settings.environment == "production" else "console"


def get_logging_config(service_name: str = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    settings = settings or get_settings()
    service = service_name or settings.app_name.lower()
    level = settings.log_level.upper()
    upstream_level = settings.upstream_log_level.upper()
    log_format = resolve_log_format(settings)

    formatter = {"datefmt": DATE_FORMAT}
    if log_format == "json":
        formatter["format"] = JSON_FORMAT.format(service=service)
        formatter["class"] = "pythonjsonlogger.jsonlogger.JsonFormatter"
    else:
        formatter["format"] = CONSOLE_FORMAT.format(service=service)

    def logger_entry(logger_level: str) -> Dict[str, Any]:
        return {"level": logger_level, "handlers": ["console"], "propagate": False}

    loggers = {"trendfeed": logger_entry(level), "uvicorn": logger_entry(level)}
    loggers.update({name: logger_entry(upstream_level) for name in UPSTREAM_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {log_format: formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": log_format,
                "stream": sys.stdout
            }
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["console"]}
    }


def setup_logging(service_name: str = None, settings: Optional[Settings] = None) -> None:
    """Configure logging using dictConfig."""
    logging.config.dictConfig(get_logging_config(service_name, settings))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
