import logging
import sqlite3
from collections.abc import Mapping
from contextlib import ExitStack, contextmanager
from typing import Callable, ContextManager, Dict, Generic, List, Optional, TypeVar

import psycopg

from tablerepo.config import config
from tablerepo.errors import (
    ConnectionUnavailable,
    ExecutionFailed,
    RepositoryError,
    RowMappingFailed,
    StatementPreparationFailed,
)
from tablerepo.record.descriptor import RecordDescriptor
from tablerepo.record.filter import Filter, Value
from tablerepo.record.statements import (
    Statement,
    build_delete,
    build_insert,
    build_select,
    build_update,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ConnectionProvider = Callable[[], ContextManager]


# Driver errors raised when the statement text itself is rejected. psycopg's
# SyntaxError, UndefinedTable and UndefinedColumn derive from ProgrammingError;
# sqlite3 uses it for placeholder and binding mismatches.
PREPARATION_ERRORS = (psycopg.ProgrammingError, sqlite3.ProgrammingError)


@contextmanager
def _open_cursor(conn, sql: str):
    try:
        cur = conn.cursor()
    except Exception as exc:
        raise StatementPreparationFailed(f"Could not open cursor: {exc}", sql) from exc
    try:
        yield cur
    finally:
        try:
            cur.close()
        except Exception:
            logger.warning("Failed to close cursor after: %s", sql, exc_info=True)


class RecordRepository(Generic[T]):
    """
    Generic CRUD access for one table, driven by a RecordDescriptor.

    Each call acquires one connection from the provider, runs a single
    statement, and releases the connection before returning. Failures are
    raised as RepositoryError subclasses.

    Usage:
        users = RecordRepository(User.descriptor)
        users.insert(User(name="Ann", email="a@x.com"))
        ann = users.select_by_id(1)
    """

    def __init__(
        self,
        descriptor: RecordDescriptor[T],
        connect: ConnectionProvider = None,
        placeholder: str = None,
        strict_columns: bool = None,
    ):
        if connect is None:
            from tablerepo import db

            connect = db.get_connection
        self.descriptor = descriptor
        self.connect = connect
        self.placeholder = placeholder or config.placeholder
        self.strict_columns = config.strict_columns if strict_columns is None else strict_columns

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, record: T) -> int:
        """Insert the record's non-null fields. Returns the affected row count."""
        statement = build_insert(self.descriptor, record, self.placeholder)
        return self._execute(statement)

    def update(self, record: T) -> int:
        """Update every non-identifier field. Returns the affected row count."""
        statement = build_update(self.descriptor, record, self.placeholder)
        return self._execute(statement)

    def delete(self, record: T) -> int:
        """Delete the record by identifier. Returns the affected row count."""
        statement = build_delete(self.descriptor, record, self.placeholder)
        return self._execute(statement)

    # =========================================================================
    # Reads
    # =========================================================================

    def select_by_id(self, record_id: Value) -> Optional[T]:
        """Get a record by identifier, or None if there is no such row."""
        condition = f"{self.descriptor.identifier.column} = {self.placeholder}"
        records = self.select_by_condition(Filter.where(condition, record_id))
        return records[0] if records else None

    def select_all(self) -> List[T]:
        """Get every record in the table, or an empty list if there are none."""
        return self.select_by_condition(None)

    def select_by_condition(self, filter: Filter = None) -> List[T]:
        """
        Get all records matching a filter.

        Args:
            filter: Condition and parameters, or None for every row

        Returns:
            List of records, empty if no rows match
        """
        statement = build_select(self.descriptor, filter)
        columns, rows = self._query(statement)
        if not rows:
            return []
        if not columns and isinstance(rows[0], Mapping):
            columns = list(rows[0])
        resolved = self._resolve_columns(columns)
        return [self._to_record(resolved, columns, row) for row in rows]

    # =========================================================================
    # Internals
    # =========================================================================

    def _acquire(self, stack: ExitStack, sql: str):
        try:
            conn = stack.enter_context(self.connect())
        except RepositoryError:
            raise
        except Exception as exc:
            logger.error("Connection unavailable for %s: %s", self.descriptor.table, exc)
            raise ConnectionUnavailable(f"Could not acquire a connection: {exc}") from exc
        if conn is None:
            raise ConnectionUnavailable(f"Connection provider returned no connection for: {sql}")
        return conn

    def _run(self, statement: Statement, fetch: bool):
        sql, params = statement
        logger.debug("%s (%d params)", sql, len(params))

        try:
            with ExitStack() as stack:
                conn = self._acquire(stack, sql)
                cur = stack.enter_context(_open_cursor(conn, sql))
                try:
                    cur.execute(sql, params)
                except Exception as exc:
                    logger.error("Statement failed: %s: %s", sql, exc)
                    if isinstance(exc, PREPARATION_ERRORS):
                        raise StatementPreparationFailed(f"Statement rejected: {exc}", sql) from exc
                    raise ExecutionFailed(f"Statement failed: {exc}", sql) from exc

                if not fetch:
                    return cur.rowcount

                try:
                    columns = [desc[0] for desc in cur.description or ()]
                    rows = cur.fetchall()
                except Exception as exc:
                    logger.error("Fetching results failed: %s: %s", sql, exc)
                    raise ExecutionFailed(f"Fetching results failed: {exc}", sql) from exc
                return columns, rows
        except RepositoryError:
            raise
        except Exception as exc:
            # Raised while the provider committed or released the connection
            logger.error("Releasing connection failed after: %s: %s", sql, exc)
            raise ExecutionFailed(f"Releasing connection failed: {exc}", sql) from exc

    def _execute(self, statement: Statement) -> int:
        return self._run(statement, fetch=False)

    def _query(self, statement: Statement):
        return self._run(statement, fetch=True)

    def _resolve_columns(self, columns: List[str]) -> Dict[str, str]:
        """
        Map each declared column to the result column holding its value.

        Names match exactly first. Otherwise they match ignoring case, since
        databases such as PostgreSQL fold unquoted identifiers to lowercase.
        A case-insensitive match that hits two result columns is ambiguous.
        """
        table = self.descriptor.table
        folded: Dict[str, List[str]] = {}
        for column in columns:
            folded.setdefault(column.lower(), []).append(column)
        declared = {c.lower() for c in self.descriptor.columns}

        if self.strict_columns:
            unknown = [
                c for c in columns
                if self.descriptor.field_for_column(c) is None and c.lower() not in declared
            ]
            if unknown:
                raise RowMappingFailed(f"Columns not declared on {table}: {unknown}")

        resolved = {}
        for field in self.descriptor.fields:
            if field.column in columns:
                resolved[field.column] = field.column
                continue
            candidates = folded.get(field.column.lower(), [])
            if not candidates:
                raise RowMappingFailed(f"Result for {table} has no column '{field.column}'")
            if len(candidates) > 1:
                raise RowMappingFailed(
                    f"Column '{field.column}' on {table} is ambiguous in result: {candidates}"
                )
            resolved[field.column] = candidates[0]
        return resolved

    def _to_record(self, resolved: Dict[str, str], columns: List[str], row) -> T:
        values = dict(row) if isinstance(row, Mapping) else dict(zip(columns, row))
        table = self.descriptor.table

        record = self.descriptor.new()
        for field in self.descriptor.fields:
            source = resolved[field.column]
            if source not in values:
                raise RowMappingFailed(f"Row from {table} has no column '{source}'")
            try:
                field.set(record, values[source])
            except Exception as exc:
                raise RowMappingFailed(
                    f"Could not assign column '{field.column}' on {table}: {exc}"
                ) from exc
        return record
