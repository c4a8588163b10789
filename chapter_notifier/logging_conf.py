"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

from .config import LoggingConfig

_LOGGING_INITIALISED = False
_LEVELS = {
    "ERROR": "ERROR",
    "WARN": "WARNING",
    "INFO": "INFO",
    "DEBUG": "DEBUG",
    # stdlib has no TRACE level
    "TRACE": "DEBUG",
}


def _stdlib_level(level: str) -> str:
    return _LEVELS.get(level.upper(), "INFO")


def configure_logging(
    settings: LoggingConfig | None = None, verbose: bool = False
) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED
    settings = settings or LoggingConfig(level="INFO")

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else _stdlib_level(settings.level)
        handlers: dict[str, dict] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "plain",
            },
        }
        if settings.path is not None:
            log_path = Path(settings.path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": level,
                "filename": str(log_path),
                "maxBytes": settings.max_size * 1024 * 1024,
                "backupCount": settings.max_backups,
                "encoding": "utf-8",
                "formatter": "plain",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    "chapter_notifier": {
                        "handlers": list(handlers),
                        "level": level,
                        "propagate": False,
                    },
                    # httpx logs every request at INFO
                    "httpx": {"level": "WARNING"},
                    "apscheduler": {"level": "WARNING"},
                },
            }
        )

        # Forward structlog events to stdlib; JSON formatting happens in the handler
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("chapter_notifier")


def component_logger(component: str) -> structlog.BoundLogger:
    """Return the application logger bound to a component name."""

    return structlog.get_logger(f"chapter_notifier.{component}").bind(component=component)


__all__ = ["configure_logging", "component_logger"]
