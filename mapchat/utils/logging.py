"""Logging utilities with structured output for the map chat service."""

from __future__ import annotations

import logging
import os
from typing import Optional

DEFAULT_NAMESPACE = "mapchat"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(namespace: str = DEFAULT_NAMESPACE, level: Optional[str] = None) -> logging.Logger:
    """Return the namespaced logger, attaching a single stream handler on first use.

    Records are single lines of ``event key=value`` pairs, so one chat turn can be
    followed across interpreter, evaluator and session by grepping its session id.
    ``level`` overrides ``LOG_LEVEL`` (default INFO) and may be applied again later.
    """

    logger = logging.getLogger(namespace)
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(resolved)
    elif level:
        logger.setLevel(resolved)
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Helper to retrieve a child logger, e.g. ``get_logger("services.session")``."""

    base = configure_logging()
    if child:
        return base.getChild(child)
    return base
