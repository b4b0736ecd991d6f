"""Query executor for SQLGauge.

two ways to reach a database:

- "duckdb" talks to duckdb directly. embedded, no server, great for local
  runs and for the test suite.
- anything else is handed to sqlalchemy as a dialect name, so "snowflake"
  (with snowflake-sqlalchemy installed) or "postgresql" just work. the
  `user:password@account/database?warehouse=wh` string happens to be exactly
  what the snowflake dialect expects after the scheme.
"""

import logging
import time
from typing import Any

import duckdb
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from sqlgauge.errors import DatabaseConnectionError, QueryError
from sqlgauge.models.config import ConnectionParams
from sqlgauge.models.query import QueryResult
from sqlgauge.models.row import to_row

logger = logging.getLogger(__name__)

DUCKDB_DRIVER = "duckdb"


class QueryExecutor:
    """Run configured queries against one warehouse connection.

    the connection is opened on first use and kept until close() - one
    connection for the whole run, no per-query reconnects.
    """

    def __init__(self, driver: str, params: ConnectionParams | None = None) -> None:
        """Initialize the executor.

        Args:
            driver: "duckdb" or a sqlalchemy dialect name (e.g. "snowflake").
            params: Connection parameters from the config.
        """
        self.driver = driver.strip().lower()
        self.params = params or ConnectionParams()
        self._duck: duckdb.DuckDBPyConnection | None = None  # lazy init
        self._engine: Engine | None = None
        self._sa_conn: Connection | None = None

    @property
    def is_duckdb(self) -> bool:
        return self.driver == DUCKDB_DRIVER

    def url(self) -> str:
        """Database url for the sqlalchemy path."""
        return f"{self.driver}://{self.params.dsn()}"

    def connect(self) -> None:
        """Open the connection if it isn't open yet."""
        if self._duck is not None or self._sa_conn is not None:
            return

        if self.is_duckdb:
            target = self.params.database or ":memory:"
            logger.info("Connecting to duckdb database %s", target)
            try:
                self._duck = duckdb.connect(target)
            except duckdb.Error as e:
                raise DatabaseConnectionError(f"Failed to open connection: {e}") from e
            return

        logger.info("Connecting to %s://%s", self.driver, self.params.redacted_dsn())
        try:
            self._engine = create_engine(self.url())
            self._sa_conn = self._engine.connect()
        except (SQLAlchemyError, ImportError) as e:
            # ImportError: dialect found but its dbapi package isn't installed
            self._dispose()
            raise DatabaseConnectionError(f"Failed to open connection: {e}") from e

    def execute(self, sql: str) -> QueryResult:
        """Execute SQL and return every row as tagged cells.

        rows come back in whatever order the database sends them. any failure
        - bad sql, no description, fetch error - is a QueryError and nothing
        from the query is returned.
        """
        self.connect()
        start = time.perf_counter()

        try:
            columns, raw_rows = self._run(sql)
        except (duckdb.Error, SQLAlchemyError) as e:
            raise QueryError(f"Failed to execute query: {e}") from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        rows = [to_row(columns, raw) for raw in raw_rows]
        logger.debug("Query returned %d rows in %.2fms", len(rows), elapsed_ms)

        return QueryResult(
            sql=sql,
            columns=columns,
            rows=rows,
            row_count=len(rows),
            execution_time_ms=round(elapsed_ms, 2),
        )

    def _run(self, sql: str) -> tuple[list[str], list[Any]]:
        if self._duck is not None:
            result = self._duck.execute(sql)
            if result.description is None:
                raise QueryError("Failed to get columns: statement returned no result set")
            # description gives us (name, type_code, ...) tuples
            columns = [desc[0] for desc in result.description]
            return columns, result.fetchall()

        if self._sa_conn is None:
            raise QueryError("Failed to execute query: connection is not open")
        # exec_driver_sql skips sqlalchemy's :param parsing, the sql goes
        # to the driver untouched
        result = self._sa_conn.exec_driver_sql(sql)
        if not result.returns_rows:
            raise QueryError("Failed to get columns: statement returned no result set")
        columns = list(result.keys())
        return columns, [tuple(row) for row in result]

    def _dispose(self) -> None:
        if self._sa_conn is not None:
            self._sa_conn.close()
            self._sa_conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def close(self) -> None:
        """Close the database connection."""
        if self._duck is not None:
            self._duck.close()
            self._duck = None
        self._dispose()

    # context manager support for clean resource management
    def __enter__(self) -> "QueryExecutor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
