"""Logging configuration for the CLI and the HTTP app.

Library modules only create loggers (``logging.getLogger(__name__)``); the
entry points call :func:`configure_logging` once.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a single stream handler to the ``searchengine`` logger."""
    logger = logging.getLogger("searchengine")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if not any(getattr(h, "_searchengine", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._searchengine = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
