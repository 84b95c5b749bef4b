"""Loguru configuration shared by the server and the CLI.

Library modules log through :mod:`logging`; importing this module routes
those records into loguru so every message ends up in one sink.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from loguru import logger

from mailforge.config import MAILFORGE_LOG_LEVEL

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

# Third-party loggers that install their own handlers.
_INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "httpx")

_configured = False


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports it.
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(level: str = MAILFORGE_LOG_LEVEL) -> None:
    """Install the stderr sink and intercept stdlib logging. Safe to call repeatedly."""
    global _configured

    logger.remove()
    logger.configure(extra={"name": "mailforge"})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

    root = logging.getLogger()
    if not any(isinstance(handler, InterceptHandler) for handler in root.handlers):
        root.addHandler(InterceptHandler())
    root.setLevel(level.upper())

    for name in _INTERCEPTED_LOGGERS:
        intercepted = logging.getLogger(name)
        intercepted.handlers = [InterceptHandler()]
        intercepted.propagate = False

    _configured = True


def get_logger(name: str) -> Any:
    """Loguru logger bound to ``name``; configures logging on first use."""
    if not _configured:
        configure_logging()
    return logger.bind(name=name)
