from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

# Values a filter may bind. datetime is a subclass of date and bool of int,
# both listed for readability.
Value = Union[None, bool, int, float, str, bytes, Decimal, date, datetime, time, timedelta, UUID]

VALUE_TYPES = (type(None), bool, int, float, str, bytes, Decimal, date, datetime, time, timedelta, UUID)


@dataclass(frozen=True)
class Filter:
    """
    A trusted SQL condition fragment plus its positional parameters.

    The condition is inserted verbatim after WHERE and must use the
    repository's placeholder style. Parameters are always bound, never
    interpolated.
    """

    condition: Optional[str] = None
    params: tuple = ()

    def __post_init__(self):
        params = tuple(self.params)
        object.__setattr__(self, "params", params)

        if not self.condition and params:
            raise ValueError("Filter parameters given without a condition")
        for index, value in enumerate(params):
            if not isinstance(value, VALUE_TYPES):
                raise TypeError(
                    f"Unsupported filter parameter at position {index}: {type(value).__name__}"
                )

    @classmethod
    def where(cls, condition: str, *params: Value) -> "Filter":
        return cls(condition, params)

    @classmethod
    def everything(cls) -> "Filter":
        return cls()
