"""Logging setup for applications embedding the Demesne models."""

from __future__ import annotations

import logging

from demesne.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging once.

    Args:
        level: Log level name or number; defaults to ``Settings.log_level``
    """

    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("demesne").setLevel(level)
