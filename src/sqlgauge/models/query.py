"""Pydantic models for executed queries and delivery outcomes."""

from pydantic import BaseModel, Field

from sqlgauge.models.row import ResultRow


class QueryResult(BaseModel):
    """Result of running one configured query.

    keeping the sql around makes log lines and error messages much easier
    to act on when a config has a dozen queries in it.
    """

    sql: str
    columns: list[str]
    rows: list[ResultRow]  # cursor order, nothing re-sorted
    row_count: int
    execution_time_ms: float


class BatchResult(BaseModel):
    """What happened to one query's batch."""

    index: int  # position in the config's query list
    sql: str
    point_count: int = 0
    status_code: int | None = None  # None if we never got as far as sending
    status: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RunReport(BaseModel):
    """Summary of a whole relay run."""

    batches: list[BatchResult] = Field(default_factory=list)

    @property
    def failed(self) -> list[BatchResult]:
        return [b for b in self.batches if not b.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total_points(self) -> int:
        return sum(b.point_count for b in self.batches)
