# src/tablerepo/conftest.py
"""
Pytest configuration and shared fixtures.

Tests are co-located with implementation files using the *_test.py suffix.
Most tests run against an in-memory sqlite3 database; the PostgreSQL
fixtures skip unless DATABASE_URL points at a reachable server.
"""

import os

# Set environment BEFORE importing any app modules
os.environ["TABLEREPO_ENV"] = "test"

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

import psycopg
import pytest

from tablerepo import db
from tablerepo.config import config
from tablerepo.record import RecordDescriptor, RecordRepository

USERS_SCHEMA = """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        name TEXT,
        email TEXT
    )
"""


@dataclass
class User:
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None


USER_DESCRIPTOR = RecordDescriptor.for_dataclass(User, "users")


# =============================================================================
# SQLite Fixtures
# =============================================================================


@pytest.fixture
def sqlite_db():
    """
    Provide an in-memory sqlite3 database with an empty users table.

    The connection stays open for the whole test so every repository call
    sees the same data.
    """
    conn = sqlite3.connect(":memory:")
    conn.execute(USERS_SCHEMA)
    conn.commit()

    yield conn

    conn.close()


@pytest.fixture
def sqlite_connect(sqlite_db):
    """
    Connection provider handing out the shared sqlite3 connection.

    Mirrors db.get_connection: commit on success, rollback on error.
    The connection itself is closed by the sqlite_db fixture.
    """

    @contextmanager
    def connect():
        try:
            yield sqlite_db
            sqlite_db.commit()
        except Exception:
            sqlite_db.rollback()
            raise

    return connect


@pytest.fixture
def user_repo(sqlite_connect):
    """Provide a RecordRepository for users backed by sqlite3."""
    return RecordRepository(USER_DESCRIPTOR, connect=sqlite_connect, placeholder="?")


# =============================================================================
# PostgreSQL Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_db():
    """
    Check once per session that the configured PostgreSQL server is reachable.
    """
    if not config.database_url:
        pytest.skip("DATABASE_URL is not set")
    try:
        with psycopg.connect(config.database_url, connect_timeout=config.connect_timeout):
            pass
    except psycopg.OperationalError as exc:
        pytest.skip(f"PostgreSQL not reachable: {exc}")
    return config.database_url


@pytest.fixture
def db_connection(test_db):
    """
    Provide a database connection with transaction rollback.

    Each test runs in a transaction that is rolled back at the end, which
    also drops the temporary users table created here.
    """
    conn = psycopg.connect(test_db)

    with conn.cursor() as cur:
        cur.execute("""
            CREATE TEMP TABLE users (
                id SERIAL PRIMARY KEY,
                name TEXT,
                email TEXT
            )
        """)

    # Override the db module to use this connection
    db.set_connection_override(conn)

    yield conn

    # Rollback any changes made during the test
    conn.rollback()
    db.clear_connection_override()
    conn.close()


@pytest.fixture
def pg_user_repo(db_connection):
    """Provide a RecordRepository for users using the default provider."""
    return RecordRepository(USER_DESCRIPTOR, placeholder="%s")
