"""Tagged values for query result rows.

drivers hand back whatever python type they feel like - Decimal, str, datetime.
wrapping every value in a Cell with an explicit kind means the mapper can
match on the kind and raise a proper error instead of blowing up halfway
through a float() call.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ValueKind(str, Enum):
    """What kind of scalar a cell holds."""

    NUMERIC = "numeric"
    STRING = "string"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    NULL = "null"
    OTHER = "other"  # dates, times, bytes, json blobs... passed through as-is


class Cell(BaseModel):
    """A single value from a result row, tagged with its kind."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ValueKind
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> "Cell":
        """Classify a raw driver value."""
        # bool before numeric - bool is a subclass of int
        if raw is None:
            return cls(kind=ValueKind.NULL)
        if isinstance(raw, bool):
            return cls(kind=ValueKind.BOOLEAN, value=raw)
        if isinstance(raw, (int, float, Decimal)):
            return cls(kind=ValueKind.NUMERIC, value=raw)
        if isinstance(raw, str):
            return cls(kind=ValueKind.STRING, value=raw)
        if isinstance(raw, datetime):
            return cls(kind=ValueKind.TIMESTAMP, value=raw)
        return cls(kind=ValueKind.OTHER, value=raw)

    def to_json_value(self) -> Any:
        """Value in a shape json.dumps (and the ingest api) can handle."""
        if self.kind == ValueKind.NUMERIC and isinstance(self.value, Decimal):
            return float(self.value)
        if self.kind == ValueKind.TIMESTAMP:
            return self.value.isoformat()
        if self.kind == ValueKind.OTHER:
            if isinstance(self.value, (date, time)):
                return self.value.isoformat()
            return str(self.value)
        return self.value


# column name -> value. only lives for one pass over a query's results
ResultRow = dict[str, Cell]


def to_row(columns: list[str], values: tuple[Any, ...] | list[Any]) -> ResultRow:
    """Zip a raw driver row with its column names."""
    return {col: Cell.of(val) for col, val in zip(columns, values)}
