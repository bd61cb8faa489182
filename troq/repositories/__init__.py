"""
Persistence adapters.

Two interchangeable backends implement the ``Repository`` contract: a flat
JSON document and a relational database. ``get_repository`` picks one from
the settings at startup; services only ever see the abstract interface.
"""
from __future__ import annotations

import logging

from troq.core.config import Settings, get_settings
from troq.repositories.base import (
    AccessDeniedError,
    DuplicateEmailError,
    NotFoundError,
    Repository,
    RepositoryError,
    UNSET,
)

logger = logging.getLogger(__name__)

BACKENDS = ("json", "sql")


def get_repository(settings: Settings | None = None) -> Repository:
    """Build the repository selected by ``STORAGE_BACKEND``."""
    settings = settings or get_settings()
    backend = settings.storage_backend
    if backend == "json":
        from troq.repositories.json_storage import JSONRepository

        logger.info("Using JSON storage at %s", settings.data_file)
        return JSONRepository(settings.data_file)
    if backend == "sql":
        from troq.repositories.sql_repository import SQLRepository

        logger.info("Using SQL storage")
        return SQLRepository()
    raise RuntimeError(f"Unknown STORAGE_BACKEND {backend!r}; expected one of {', '.join(BACKENDS)}.")


__all__ = [
    "AccessDeniedError",
    "DuplicateEmailError",
    "NotFoundError",
    "Repository",
    "RepositoryError",
    "UNSET",
    "get_repository",
]
