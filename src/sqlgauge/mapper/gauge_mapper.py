"""Row to gauge mapping for SQLGauge.

for every metric spec, for every row: pull the value column, the dimension
columns and EVENT_AT, emit one data point. that's the whole algorithm - the
interesting part is being strict about what counts as a valid value.
"""

import math
from datetime import datetime, timezone

from sqlgauge.errors import MappingError
from sqlgauge.models.config import MetricSpec
from sqlgauge.models.datapoint import DataPoint
from sqlgauge.models.row import Cell, ResultRow, ValueKind

EVENT_TIME_COLUMN = "EVENT_AT"


def map_rows(
    rows: list[ResultRow],
    metrics: list[MetricSpec],
    string_values_only: bool = False,
) -> list[DataPoint]:
    """Cross metrics with rows, one data point per pair.

    order is metric-major: all rows for the first metric, then all rows for
    the second, and so on. the first bad cell raises and nothing is returned.
    """
    points = []
    for metric in metrics:
        for row in rows:
            points.append(map_row(row, metric, string_values_only))
    return points


def map_row(row: ResultRow, metric: MetricSpec, string_values_only: bool = False) -> DataPoint:
    """Build a single data point from one row."""
    value = extract_value(row, metric.value_column, string_values_only)
    dimensions = {
        column: get_cell(row, column).to_json_value() for column in metric.dimension_columns
    }
    timestamp = extract_timestamp_ms(row, EVENT_TIME_COLUMN)
    return DataPoint(
        metric=metric.metric_name,
        value=value,
        dimensions=dimensions,
        timestamp=timestamp,
    )


def get_cell(row: ResultRow, column: str) -> Cell:
    """Look up a column, failing loudly if the query didn't select it."""
    try:
        return row[column]
    except KeyError:
        raise MappingError(f"Column {column} does not exist", column=column) from None


def extract_value(row: ResultRow, column: str, string_values_only: bool = False) -> float:
    """Read the metric value as a float64.

    some snowflake drivers hand NUMBER columns back as strings, which is why
    string parsing is the primary path. native numerics are accepted unless
    string_values_only is set.
    """
    cell = get_cell(row, column)

    if cell.kind == ValueKind.STRING:
        try:
            # float() takes "1_000", a plain decimal parser does not
            if "_" in cell.value:
                raise ValueError(cell.value)
            value = float(cell.value.strip())
        except ValueError:
            raise MappingError(
                f"Failed to convert {column} to float64: {cell.value!r} is not a number",
                column=column,
            ) from None
    elif cell.kind == ValueKind.NUMERIC and not string_values_only:
        value = float(cell.value)
    else:
        expected = "string" if string_values_only else "string or numeric"
        raise MappingError(
            f"Failed to convert {column} to float64: expected {expected} value, "
            f"got {cell.kind.value}",
            column=column,
        )

    # float('nan') parses fine but the ingest api rejects it
    if not math.isfinite(value):
        raise MappingError(
            f"Failed to convert {column} to float64: {value} is not finite", column=column
        )
    return value


def extract_timestamp_ms(row: ResultRow, column: str = EVENT_TIME_COLUMN) -> int:
    """Read an event timestamp as unix epoch milliseconds.

    timestamp cells are used directly; strings are accepted if they parse as
    iso-8601. naive datetimes are taken to be UTC (snowflake TIMESTAMP_NTZ).
    """
    cell = get_cell(row, column)

    if cell.kind == ValueKind.TIMESTAMP:
        moment = cell.value
    elif cell.kind == ValueKind.STRING:
        try:
            moment = datetime.fromisoformat(cell.value.strip())
        except ValueError:
            raise MappingError(
                f"Failed to convert {column} to timestamp: {cell.value!r}", column=column
            ) from None
    else:
        raise MappingError(
            f"Failed to convert {column} to timestamp: got {cell.kind.value}", column=column
        )

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    # integer math so we don't pick up float rounding on the millis
    delta = moment - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
