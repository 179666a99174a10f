#  -*- coding: utf-8 -*-
"""
Structured logging for proplens.

Loggers returned by ``get_logger`` route structlog events to the standard
library logger of the same name, so nothing is emitted until the
application configures the ``proplens`` logger. ``configure_logging`` does
that with a console or JSON renderer.
"""

from __future__ import annotations

import logging
import sys

import structlog

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from proplens.settings import AnalysisSettings


ROOT_LOGGER_NAME: str = 'proplens'

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]


class _ProplensHandler(logging.StreamHandler):
    """Stream handler installed by ``configure_logging``."""


def get_logger(name: str = ROOT_LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger bound to the stdlib logger ``name``.

    Events below the stdlib logger's effective level are dropped before any
    processing.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(level: str | None = None,
                      *,
                      settings: AnalysisSettings | None = None,
                      json_format: bool = False,
                      stream: IO[str] | None = None) -> logging.Handler:
    """
    Attach a handler rendering proplens events.

    Parameters
    ----------
    level : str, optional
        Level name. Defaults to ``settings.log_level``.
    settings : AnalysisSettings, optional
        Settings supplying the default level.
    json_format : bool, default False
        Render one JSON object per line instead of the console format.
    stream : file-like, optional
        Destination, ``sys.stderr`` by default.

    Returns
    -------
    logging.Handler
        The installed handler. A handler installed by a previous call is
        replaced.
    """
    if level is None:
        if settings is None:
            from proplens.settings import AnalysisSettings
            settings = AnalysisSettings()

        level = settings.log_level

    numeric_level = _LEVEL_MAP.get(level.upper(), logging.WARNING)

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    handler = _ProplensHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for existing in list(logger.handlers):
        if isinstance(existing, _ProplensHandler):
            logger.removeHandler(existing)

    logger.addHandler(handler)
    logger.setLevel(numeric_level)

    return handler
