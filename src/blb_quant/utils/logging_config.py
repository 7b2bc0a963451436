"""Minimal structured logging helpers for the project."""

from __future__ import annotations

import logging
from typing import Mapping


def get_logger(name: str, *, level: int | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def log_dict(
    logger: logging.Logger,
    message: str,
    payload: Mapping[str, object],
    level: int = logging.INFO,
) -> None:
    """Log ``payload`` as ``key=value`` pairs and attach it as record extras."""
    serialised = ", ".join(f"{key}={value}" for key, value in payload.items())
    logger.log(level, "%s | %s", message, serialised, extra=dict(payload))
