"""PostgreSQL connection helpers."""

from __future__ import annotations

import logging

import psycopg

logger = logging.getLogger(__name__)


class DatabaseConnectionError(RuntimeError):
    """Raised when a PostgreSQL connection cannot be opened."""


def connect_readonly(dsn: str) -> psycopg.Connection:
    """Open a PostgreSQL connection configured as read-only by default."""
    try:
        conn = psycopg.connect(
            dsn,
            connect_timeout=5,
            autocommit=True,
            options="-c default_transaction_read_only=on",
        )
    except psycopg.Error as exc:
        raise DatabaseConnectionError(
            f"Could not connect to PostgreSQL with provided DSN: {exc}"
        ) from exc
    logger.debug("Opened read-only PostgreSQL connection")
    return conn
