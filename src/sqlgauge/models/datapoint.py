"""Pydantic models for the ingest wire format.

these serialize straight to the signalfx v2/datapoint body, so field names
here are the json keys. don't rename them.
"""

from typing import Any

from pydantic import BaseModel, Field


class DataPoint(BaseModel):
    """A single gauge observation."""

    metric: str
    value: float
    dimensions: dict[str, Any] = Field(default_factory=dict)
    timestamp: int  # unix epoch milliseconds


class GaugeBatch(BaseModel):
    """Envelope for a batch of gauges - one per query."""

    gauge: list[DataPoint] = Field(default_factory=list)
