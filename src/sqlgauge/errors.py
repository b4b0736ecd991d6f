"""Exception hierarchy for SQLGauge.

every stage of the relay has its own error type so callers can tell where
things went wrong. the library never exits the process - that's the cli's job.
"""


class SqlGaugeError(Exception):
    """Base class for all relay errors."""

    stage = "relay"


class ConfigError(SqlGaugeError):
    """Config file missing, unreadable or malformed."""

    stage = "config"


class DatabaseConnectionError(SqlGaugeError):
    """Could not open the warehouse connection (driver, auth, network)."""

    stage = "connection"


class QueryError(SqlGaugeError):
    """SQL execution, column introspection or row fetch failed."""

    stage = "query"


class MappingError(SqlGaugeError):
    """A result row couldn't be turned into a data point.

    the message always names the offending column.
    """

    stage = "mapping"

    def __init__(self, message: str, column: str | None = None) -> None:
        super().__init__(message)
        self.column = column


class DeliveryError(SqlGaugeError):
    """Building, serializing or sending the ingest request failed."""

    stage = "delivery"
