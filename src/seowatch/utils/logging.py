"""Structured logging setup using structlog."""

import logging
import sys
from typing import Any

import structlog

# Libraries that log every job run or request at INFO.
NOISY_LIBRARIES = ("apscheduler", "aiohttp.access", "uvicorn.access")


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog and the standard library root logger."""
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class StructuredLogger:
    """Module logger that tags every event with its component name.

    The underlying structlog logger is resolved on each call so loggers
    created at import time pick up configuration done later by
    ``setup_logging``.
    """

    def __init__(self, name: str, **context: Any):
        self.name = name
        self.context = context

    def _log(self, _level: str, _event: str, /, **kwargs: Any) -> None:
        logger = structlog.get_logger(self.name)
        getattr(logger, _level)(_event, logger=self.name, **self.context, **kwargs)

    def debug(self, event: str, /, **kwargs: Any) -> None:
        self._log("debug", event, **kwargs)

    def info(self, event: str, /, **kwargs: Any) -> None:
        self._log("info", event, **kwargs)

    def warning(self, event: str, /, **kwargs: Any) -> None:
        self._log("warning", event, **kwargs)

    def error(self, event: str, /, **kwargs: Any) -> None:
        self._log("error", event, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Return a logger that adds ``kwargs`` to every event."""
        return StructuredLogger(self.name, **{**self.context, **kwargs})


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
