"""
Record

This module maps record types onto tables and provides generic CRUD access.
"""

from tablerepo.record.descriptor import Field, RecordDescriptor, camel_to_snake
from tablerepo.record.filter import Filter, Value
from tablerepo.record.repository import RecordRepository
from tablerepo.record.statements import Statement

__all__ = [
    "Field",
    "Filter",
    "RecordDescriptor",
    "RecordRepository",
    "Statement",
    "Value",
    "camel_to_snake",
]
