"""Pydantic models for SQLGauge."""

from sqlgauge.models.config import (
    ConnectionParams,
    Exporters,
    IngestSettings,
    MetricSpec,
    QuerySpec,
    Receivers,
    RelayConfig,
    SqlReceiver,
)
from sqlgauge.models.datapoint import DataPoint, GaugeBatch
from sqlgauge.models.query import BatchResult, QueryResult, RunReport
from sqlgauge.models.row import Cell, ResultRow, ValueKind, to_row

__all__ = [
    "BatchResult",
    "Cell",
    "ConnectionParams",
    "DataPoint",
    "Exporters",
    "GaugeBatch",
    "IngestSettings",
    "MetricSpec",
    "QueryResult",
    "QuerySpec",
    "Receivers",
    "RelayConfig",
    "ResultRow",
    "RunReport",
    "SqlReceiver",
    "ValueKind",
    "to_row",
]
