"""
Default database connection provider.

Supplies one psycopg connection per call for RecordRepository. Any other
zero-argument callable returning a context manager that yields a DB-API
connection can be injected instead.

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

import logging
from contextlib import contextmanager

import psycopg

from tablerepo.config import config
from tablerepo.errors import ConnectionUnavailable

logger = logging.getLogger(__name__)

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Management
# =============================================================================


def _connect() -> psycopg.Connection:
    if not config.database_url:
        raise ConnectionUnavailable("DATABASE_URL is not configured")
    try:
        return psycopg.connect(config.database_url, connect_timeout=config.connect_timeout)
    except psycopg.OperationalError as exc:
        logger.error("Could not connect to database: %s", exc)
        raise ConnectionUnavailable(f"Could not connect to database: {exc}") from exc


@contextmanager
def get_connection():
    """
    Context manager for database connections.

    In normal operation:
        - Opens a new connection
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done (close failures are logged)

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction

    Usage:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT ...")
    """
    if _connection_override is not None:
        yield _connection_override
        return

    conn = _connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        try:
            conn.close()
        except psycopg.Error:
            logger.warning("Failed to close database connection", exc_info=True)
