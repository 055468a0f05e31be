"""Structured logging configuration for bountyhook.

Relay and API lines go through structlog with key/value fields; library
modules keep stdlib loggers and share the same root handler and level.
Every line emitted while a poll cycle runs carries that cycle's number.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import Processor

# Chatty third-party loggers; one INFO line per HTTP request otherwise
_NOISY_LOGGERS = ("httpx", "httpcore")

_configured = False


def _renderer(format: str) -> list[Processor]:
    if format.lower() == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(level: str = "INFO", format: str = "json") -> None:
    """Configure logging for the relay.

    Safe to call repeatedly: the last call's level and format win, even
    if an import already configured the defaults.

    Args:
        level: Log level name. Unknown names fall back to INFO.
        format: "json" for production, "text" for a console renderer.
    """
    global _configured

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(log_level)

    noisy_level = log_level if log_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer(format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    return structlog.get_logger(name)  # type: ignore[no-any-return]


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Attach fields to every log line emitted inside the block.

    Previous values of the same keys are restored on exit, so nested
    blocks and concurrent tasks (each with its own context copy) do not
    leak fields into each other.

    Example:
        ```python
        with log_context(cycle=7):
            logger.info("Poll cycle complete")  # includes cycle=7
        ```
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
