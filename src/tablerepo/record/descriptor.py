"""
Record descriptors.

A RecordDescriptor is the static mapping between a record type and a table:
the table name, an ordered list of fields (one of them the identifier), and a
factory producing blank instances. It is built once, at registration time,
and never changes afterwards.
"""

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from tablerepo.errors import DescriptorError

T = TypeVar("T")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TABLE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def camel_to_snake(name: str) -> str:
    """Translate an attribute name like ``createdAt`` to ``created_at``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class Field:
    """
    One attribute of a record and the column it maps to.

    Args:
        name: Attribute name on the record
        identifier: Whether this field is the record's primary key
        column: Column name, defaults to ``name``
        getter: Reads the value from a record, defaults to getattr
        setter: Writes a value onto a record, defaults to setattr
        converter: Applied to column values on read
    """

    name: str
    identifier: bool = False
    column: Optional[str] = None
    getter: Optional[Callable[[Any], Any]] = None
    setter: Optional[Callable[[Any, Any], None]] = None
    converter: Optional[Callable[[Any], Any]] = None

    def __post_init__(self):
        if self.column is None:
            object.__setattr__(self, "column", self.name)

    def get(self, record) -> Any:
        if self.getter is not None:
            return self.getter(record)
        return getattr(record, self.name)

    def set(self, record, value) -> None:
        if self.converter is not None:
            value = self.converter(value)
        if self.setter is not None:
            self.setter(record, value)
        else:
            setattr(record, self.name, value)


class RecordDescriptor(Generic[T]):
    """
    Table mapping for a record type.

    Raises DescriptorError if the table or column names are not plain SQL
    identifiers, if names repeat, or if there is not exactly one identifier
    field. Names are interpolated into SQL text, so descriptors must come
    from trusted code.
    """

    def __init__(self, table: str, fields: Iterable[Field], factory: Callable[[], T]):
        fields = tuple(fields)

        if not table or not _TABLE.match(table):
            raise DescriptorError(f"Invalid table name: {table!r}")
        if not fields:
            raise DescriptorError(f"Descriptor for {table} declares no fields")

        names = [f.name for f in fields]
        columns = [f.column for f in fields]
        for column in columns:
            if not _IDENTIFIER.match(column):
                raise DescriptorError(f"Invalid column name on {table}: {column!r}")
        if len(set(names)) != len(names):
            raise DescriptorError(f"Duplicate field names on {table}: {names}")
        if len(set(columns)) != len(columns):
            raise DescriptorError(f"Duplicate column names on {table}: {columns}")

        identifiers = [f for f in fields if f.identifier]
        if len(identifiers) != 1:
            raise DescriptorError(
                f"Descriptor for {table} must declare exactly one identifier field, "
                f"found {len(identifiers)}"
            )

        self._table = table
        self._fields = fields
        self._identifier = identifiers[0]
        self._factory = factory
        self._by_column = {f.column: f for f in fields}

    @property
    def table(self) -> str:
        return self._table

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields

    @property
    def identifier(self) -> Field:
        return self._identifier

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(f.column for f in self._fields)

    def field_for_column(self, column: str) -> Optional[Field]:
        return self._by_column.get(column)

    def new(self) -> T:
        """Create a blank record instance."""
        return self._factory()

    def __repr__(self) -> str:
        return f"RecordDescriptor(table={self._table!r}, columns={list(self.columns)!r})"

    @classmethod
    def for_dataclass(
        cls,
        record_type: type[T],
        table: str,
        identifier: str = "id",
        naming: Callable[[str], str] = None,
        converters: dict[str, Callable[[Any], Any]] = None,
    ) -> "RecordDescriptor[T]":
        """
        Build a descriptor from a dataclass's declared fields.

        Fields keep their declaration order. Blank instances are created
        without running ``__init__`` and values are assigned through
        ``object.__setattr__``, so frozen dataclasses can be read back too.

        Args:
            record_type: The dataclass to map
            table: Table name
            identifier: Name of the identifier attribute
            naming: Optional attribute-to-column translation, e.g. camel_to_snake
            converters: Optional per-attribute converters applied on read

        Returns:
            RecordDescriptor for record_type
        """
        if not dataclasses.is_dataclass(record_type):
            raise DescriptorError(f"{record_type!r} is not a dataclass")

        converters = converters or {}
        unknown = set(converters) - {f.name for f in dataclasses.fields(record_type)}
        if unknown:
            raise DescriptorError(f"Converters given for unknown fields: {sorted(unknown)}")

        def assign(name):
            return lambda record, value: object.__setattr__(record, name, value)

        fields = [
            Field(
                name=f.name,
                identifier=f.name == identifier,
                column=naming(f.name) if naming else f.name,
                setter=assign(f.name),
                converter=converters.get(f.name),
            )
            for f in dataclasses.fields(record_type)
        ]
        return cls(table, fields, factory=lambda: record_type.__new__(record_type))
