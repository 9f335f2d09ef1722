"""
tablerepo: generic record-to-table CRUD over DB-API connections.
"""

from tablerepo.errors import (
    ConnectionUnavailable,
    DescriptorError,
    ExecutionFailed,
    MissingIdentifier,
    NoInsertableFields,
    RepositoryError,
    RowMappingFailed,
    StatementPreparationFailed,
)
from tablerepo.record import Field, Filter, RecordDescriptor, RecordRepository, camel_to_snake

__all__ = [
    "ConnectionUnavailable",
    "DescriptorError",
    "ExecutionFailed",
    "Field",
    "Filter",
    "MissingIdentifier",
    "NoInsertableFields",
    "RecordDescriptor",
    "RecordRepository",
    "RepositoryError",
    "RowMappingFailed",
    "StatementPreparationFailed",
    "camel_to_snake",
]
