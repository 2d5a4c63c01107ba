"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False


def _default_log_dir() -> Path:
    env_root = os.environ.get("FUNDING_HARVESTER_HOME")
    root = Path(env_root).expanduser() if env_root else Path.cwd()
    return root / "logs"


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED

    if not _LOGGING_INITIALISED:
        log_dir = log_dir or _default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        harvester_log = log_dir / "harvester.log"
        error_log = log_dir / "error.log"
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "json",
                    },
                    "harvester_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(harvester_log),
                        "formatter": "json",
                        "encoding": "utf-8",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "formatter": "json",
                        "encoding": "utf-8",
                    },
                },
                "loggers": {
                    "funding_harvester": {
                        "handlers": ["console", "harvester_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

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
    return structlog.get_logger("funding_harvester")


def source_logger(source_name: str) -> structlog.BoundLogger:
    """Return a logger bound to a specific source."""

    return structlog.get_logger(f"funding_harvester.source.{source_name}").bind(source=source_name)


__all__ = ["configure_logging", "source_logger"]
