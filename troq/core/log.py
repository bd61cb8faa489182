"""Logging setup for the API process."""

from __future__ import annotations

import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once; ``LOG_LEVEL`` is used when no level is given."""
    logging.basicConfig(level=level or get_settings().log_level, format=LOG_FORMAT)
