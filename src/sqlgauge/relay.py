"""Main Relay interface for SQLGauge."""

import logging
from collections.abc import Callable
from pathlib import Path

from sqlgauge.client.ingest import IngestClient
from sqlgauge.errors import DatabaseConnectionError, SqlGaugeError
from sqlgauge.executor.sql_executor import QueryExecutor
from sqlgauge.mapper.gauge_mapper import map_rows
from sqlgauge.models.config import QuerySpec, RelayConfig
from sqlgauge.models.datapoint import DataPoint
from sqlgauge.models.query import BatchResult, RunReport
from sqlgauge.parser.loader import load_config

logger = logging.getLogger(__name__)


class Relay:
    """Query the warehouse, map rows to gauges, ship them. Once."""

    def __init__(
        self,
        config: RelayConfig,
        executor: QueryExecutor | None = None,
        client: IngestClient | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            config: Loaded relay config.
            executor: Override the query executor (tests, shared connections).
            client: Override the ingest client.
        """
        self.config = config
        self.executor = executor or QueryExecutor(config.sql.db_driver, config.sql.params)
        self.client = client or IngestClient(config.ingest)

    @classmethod
    def from_file(cls, path: str | Path) -> "Relay":
        return cls(load_config(path))

    def run(
        self,
        fail_fast: bool = True,
        on_batch: Callable[[BatchResult], None] | None = None,
    ) -> RunReport:
        """Run every configured query, in order, and send one batch per query.

        Args:
            fail_fast: Raise on the first error (the default). When False,
                query/mapping/delivery errors are recorded on the batch and
                the next query still runs. A connection error always raises
                since no query can run without one.
            on_batch: Called after each batch is sent (or recorded as failed).

        Returns:
            RunReport with one BatchResult per query.
        """
        report = RunReport()
        try:
            # connect up front so a bad connection fails before any query
            self.executor.connect()
            for index, spec in enumerate(self.config.sql.queries):
                batch = BatchResult(index=index, sql=spec.query)
                report.batches.append(batch)
                try:
                    points = self._collect_one(spec)
                    batch.point_count = len(points)
                    response = self.client.send(points)
                    batch.status_code = response.status_code
                    batch.status = f"{response.status_code} {response.reason}"
                    if on_batch:
                        on_batch(batch)
                except DatabaseConnectionError:
                    raise
                except SqlGaugeError as e:
                    batch.error = f"{e.stage} error: {e}"
                    if fail_fast:
                        raise
                    logger.error("Query #%d failed, continuing: %s", index, batch.error)
                    if on_batch:
                        on_batch(batch)
        finally:
            self.executor.close()
        return report

    def collect(self) -> list[list[DataPoint]]:
        """Execute and map every query without sending anything."""
        try:
            return [self._collect_one(spec) for spec in self.config.sql.queries]
        finally:
            self.executor.close()

    def _collect_one(self, spec: QuerySpec) -> list[DataPoint]:
        result = self.executor.execute(spec.query)
        points = map_rows(result.rows, spec.metrics, self.config.sql.string_values_only)
        logger.info(
            "Mapped %d rows x %d metrics -> %d data points",
            result.row_count,
            len(spec.metrics),
            len(points),
        )
        return points

    def close(self) -> None:
        """Close database connection and http session."""
        self.executor.close()
        self.client.close()

    def __enter__(self) -> "Relay":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
