"""
SQL statement builders.

Each builder returns a Statement with the SQL text and the values to bind,
in placeholder order. Table and column names come from the descriptor and
are written into the text as-is; values never are.
"""

from typing import NamedTuple

from tablerepo.errors import MissingIdentifier, NoInsertableFields
from tablerepo.record.descriptor import RecordDescriptor
from tablerepo.record.filter import Filter


class Statement(NamedTuple):
    sql: str
    params: tuple


def identifier_value(descriptor: RecordDescriptor, record):
    """Return the record's identifier value, raising MissingIdentifier if unset."""
    value = descriptor.identifier.get(record)
    if value is None:
        raise MissingIdentifier(
            f"{descriptor.table} record has no value for identifier "
            f"'{descriptor.identifier.name}'"
        )
    return value


def build_insert(descriptor: RecordDescriptor, record, placeholder: str) -> Statement:
    """INSERT over the fields that currently hold a non-null value."""
    columns = []
    params = []
    for field in descriptor.fields:
        value = field.get(record)
        if value is not None:
            columns.append(field.column)
            params.append(value)

    if not columns:
        raise NoInsertableFields(f"{descriptor.table} record has no non-null fields to insert")

    sql = "INSERT INTO {} ({}) VALUES ({})".format(
        descriptor.table,
        ", ".join(columns),
        ", ".join([placeholder] * len(columns)),
    )
    return Statement(sql, tuple(params))


def build_update(descriptor: RecordDescriptor, record, placeholder: str) -> Statement:
    """UPDATE every non-identifier field, keyed on the identifier."""
    id_value = identifier_value(descriptor, record)
    fields = [f for f in descriptor.fields if not f.identifier]

    if fields:
        assignments = ", ".join(f"{f.column} = {placeholder}" for f in fields)
    else:
        # Identifier-only records still produce a valid, no-op update
        column = descriptor.identifier.column
        assignments = f"{column} = {column}"

    sql = f"UPDATE {descriptor.table} SET {assignments} WHERE {descriptor.identifier.column} = {placeholder}"
    params = tuple(f.get(record) for f in fields) + (id_value,)
    return Statement(sql, params)


def build_delete(descriptor: RecordDescriptor, record, placeholder: str) -> Statement:
    id_value = identifier_value(descriptor, record)
    sql = f"DELETE FROM {descriptor.table} WHERE {descriptor.identifier.column} = {placeholder}"
    return Statement(sql, (id_value,))


def build_select(descriptor: RecordDescriptor, filter: Filter = None) -> Statement:
    sql = f"SELECT * FROM {descriptor.table}"
    if filter is not None and filter.condition:
        sql += f" WHERE {filter.condition}"
        return Statement(sql, filter.params)
    return Statement(sql, ())
