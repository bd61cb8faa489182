"""Create or drop the ``users``/``offers`` schema.

Run ``python -m troq.db.create_tables [DATABASE_URL]``; without an argument the
configured ``DATABASE_URL`` is used.
"""
from __future__ import annotations

import logging
import sys

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .session import Base, build_engine, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata

logger = logging.getLogger(__name__)


def _resolve(bind: Engine | str | None) -> Engine:
    if bind is None:
        return get_engine()
    if isinstance(bind, str):
        return build_engine(bind)
    return bind


def create_all(bind: Engine | str | None = None) -> Engine:
    """Create missing tables on ``bind`` (engine, URL or the configured engine)."""
    engine = _resolve(bind)
    Base.metadata.create_all(bind=engine)
    logger.info("Schema ready: %s", ", ".join(sorted(Base.metadata.tables)))
    return engine


def drop_all(bind: Engine | str | None = None) -> None:
    engine = _resolve(bind)
    Base.metadata.drop_all(bind=engine)
    logger.info("Schema dropped")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        create_all(sys.argv[1] if len(sys.argv) > 1 else None)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
