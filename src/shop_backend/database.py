"""
Database connection setup for a worker process.

Each worker opens its own SQLAlchemy engine with a bounded connection pool.
Pools are never shared or coordinated across workers; the total number of
connections a deployment can open is ``workers * max_pool_size``.

A failed connection is logged and does not stop the worker from serving.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .models import DatabaseState

logger = logging.getLogger(__name__)


def connect_database(url: Optional[str], max_pool_size: int = 10) -> Optional[Engine]:
    """
    Create the worker's engine and verify the database is reachable.

    Args:
        url: SQLAlchemy database URL (e.g. ``postgresql+psycopg://...``)
        max_pool_size: Maximum number of pooled connections for this worker

    Returns:
        The connected engine, or None if the URL is missing or the database
        could not be reached
    """
    if not url:
        logger.error("Database connection error: DATABASE_URL is not set")
        return None

    engine: Optional[Engine] = None
    try:
        engine = create_engine(
            url,
            pool_size=max_pool_size,
            max_overflow=0,
            pool_pre_ping=True,
        )
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, TypeError, ImportError) as exc:  # bad URL, pool options or missing driver
        logger.error(f"Database connection error: {exc}")
        if engine is not None:
            engine.dispose()
        return None

    logger.info("Database connected")
    return engine


def database_status(engine: Optional[Engine]) -> DatabaseState:
    return DatabaseState.CONNECTED if engine is not None else DatabaseState.UNAVAILABLE


def dispose_database(engine: Optional[Engine]) -> None:
    if engine is None:
        return
    engine.dispose()
    logger.info("Database connection pool closed")
