"""
Repository errors.

Every failure raised by a RecordRepository derives from RepositoryError, so
callers can branch on the specific subclass or catch the whole family.
Driver exceptions are chained as __cause__.
"""


class RepositoryError(Exception):
    """Base exception for record repository errors."""


class DescriptorError(RepositoryError, ValueError):
    """Raised when a record descriptor is malformed."""


class ConnectionUnavailable(RepositoryError):
    """Raised when no database connection could be acquired."""


class StatementError(RepositoryError):
    """Base for failures tied to a specific SQL statement."""

    def __init__(self, message: str, sql: str = None):
        super().__init__(message)
        self.sql = sql


class StatementPreparationFailed(StatementError):
    """Raised when the driver rejects the statement or no cursor can be opened."""


class ExecutionFailed(StatementError):
    """Raised when executing, fetching, or committing a statement fails."""


class RowMappingFailed(RepositoryError):
    """Raised when a result row cannot be mapped onto a record."""


class MissingIdentifier(RepositoryError):
    """Raised when update/delete is attempted on a record without an identifier value."""


class NoInsertableFields(RepositoryError):
    """Raised when insert is attempted on a record with no non-null fields."""
