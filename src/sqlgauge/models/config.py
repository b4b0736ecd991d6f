"""Pydantic models for the relay configuration.

the yaml layout follows the smartagent/sql receiver from the otel collector
so existing configs can be pointed at this tool without edits. field names
stay camelCase in yaml via aliases, snake_case in python.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INGEST_URL = "https://ingest.us1.signalfx.com/v2/datapoint"


class _ConfigModel(BaseModel):
    # frozen: config is loaded once and never mutated after that
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class MetricSpec(_ConfigModel):
    """How to turn one column of a query result into a gauge."""

    metric_name: str = Field(alias="metricName", min_length=1)
    value_column: str = Field(alias="valueColumn", min_length=1)
    dimension_columns: list[str] = Field(default_factory=list, alias="dimensionColumns")


class QuerySpec(_ConfigModel):
    """A SQL statement plus the metrics extracted from its rows."""

    query: str = Field(min_length=1)
    metrics: list[MetricSpec] = Field(default_factory=list)


class ConnectionParams(_ConfigModel):
    """Warehouse connection parameters.

    all optional strings since different drivers need different subsets -
    duckdb only cares about database, snowflake wants everything.
    """

    account: str = ""
    database: str = ""
    warehouse: str = ""
    user: str = ""
    password: str = ""
    connection_string: str = Field(default="", alias="connectionString")

    def _build_dsn(self, password: str) -> str:
        if self.connection_string:
            return self.connection_string
        # NOTE: plain interpolation, nothing is escaped. a password containing
        # '@' or '/' produces a broken dsn, and anything user-supplied here
        # needs url quoting first.
        return (
            f"{self.user}:{password}@{self.account}/{self.database}"
            f"?warehouse={self.warehouse}"
        )

    def dsn(self) -> str:
        """Build the `user:password@account/database?warehouse=...` string."""
        return self._build_dsn(self.password)

    def redacted_dsn(self) -> str:
        """Same as dsn() but safe to log."""
        if self.connection_string:
            return "<connectionString>"
        return self._build_dsn("***")


class SqlReceiver(_ConfigModel):
    """The smartagent/sql receiver block."""

    type: str | None = None
    interval_seconds: int = Field(default=0, alias="intervalSeconds", ge=0)  # unused in one-shot mode
    db_driver: str = Field(alias="dbDriver", min_length=1)
    params: ConnectionParams = Field(default_factory=ConnectionParams)
    queries: list[QuerySpec] = Field(default_factory=list)
    # reject native numeric values in value columns, only parse strings
    string_values_only: bool = Field(default=False, alias="stringValuesOnly")


class IngestSettings(_ConfigModel):
    """Where and how to deliver data points."""

    endpoint: str = DEFAULT_INGEST_URL
    auth_token: str = Field(alias="authToken", min_length=1, repr=False)
    timeout_ms: int = Field(default=10_000, alias="timeoutMs", gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class Receivers(_ConfigModel):
    sql: SqlReceiver = Field(alias="smartagent/sql")


class Exporters(_ConfigModel):
    signalfx: IngestSettings


class RelayConfig(_ConfigModel):
    """The whole config document."""

    receivers: Receivers
    exporters: Exporters

    # shortcuts since nobody wants to type config.receivers.sql.queries

    @property
    def sql(self) -> SqlReceiver:
        return self.receivers.sql

    @property
    def ingest(self) -> IngestSettings:
        return self.exporters.signalfx
