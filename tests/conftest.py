"""Pytest fixtures for SQLGauge tests."""

from collections.abc import Generator
from pathlib import Path

import duckdb
import pytest
import requests

from sqlgauge.executor.sql_executor import QueryExecutor
from sqlgauge.models.config import ConnectionParams, IngestSettings
from sqlgauge.parser.loader import load_config


class FakeSession:
    """Stands in for requests.Session - records posts, returns a canned status."""

    def __init__(self, status_code: int = 200, reason: str = "OK", error: Exception | None = None):
        self.status_code = status_code
        self.reason = reason
        self.error = error
        self.calls: list[dict] = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        response = requests.Response()
        response.status_code = self.status_code
        response.reason = self.reason
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def ingest_settings() -> IngestSettings:
    return IngestSettings(
        endpoint="https://ingest.example.com/v2/datapoint",
        authToken="test-token",
        timeoutMs=2500,
    )


@pytest.fixture
def sample_readings() -> list[tuple]:
    """Sample rows: value as string (like the snowflake go driver), region, event time."""
    return [
        ("10.5", "us-east", "2024-01-01 00:00:00"),
        ("3", "eu-west", "2024-01-01 00:01:00"),
        ("0.25", "ap-south", "2024-01-01 00:02:00"),
    ]


@pytest.fixture
def warehouse_path(tmp_path: Path, sample_readings: list[tuple]) -> Path:
    """A duckdb file with a readings table."""
    db_path = tmp_path / "warehouse.duckdb"
    conn = duckdb.connect(str(db_path))
    conn.execute("""
        CREATE TABLE readings (
            VAL VARCHAR,
            REGION VARCHAR,
            EVENT_AT TIMESTAMP
        )
    """)
    conn.executemany("INSERT INTO readings VALUES (?, ?, ?)", sample_readings)
    conn.close()
    return db_path


@pytest.fixture
def executor(warehouse_path: Path) -> Generator[QueryExecutor, None, None]:
    executor = QueryExecutor("duckdb", ConnectionParams(database=str(warehouse_path)))
    yield executor
    executor.close()


@pytest.fixture
def sample_config_yaml(warehouse_path: Path) -> str:
    """Relay config against the duckdb warehouse."""
    return f"""
receivers:
  smartagent/sql:
    type: sql
    intervalSeconds: 60
    dbDriver: duckdb
    params:
      database: "{warehouse_path}"
    queries:
      - query: SELECT VAL, REGION, EVENT_AT FROM readings ORDER BY EVENT_AT
        metrics:
          - metricName: cpu.load
            valueColumn: VAL
            dimensionColumns: [REGION]
          - metricName: cpu.load.total
            valueColumn: VAL
      - query: SELECT 10.5 AS VAL, 'us-east' AS REGION, '2024-01-01T00:00:00Z' AS EVENT_AT
        metrics:
          - metricName: cpu.load
            valueColumn: VAL
            dimensionColumns: [REGION]

exporters:
  signalfx:
    endpoint: https://ingest.example.com/v2/datapoint
    authToken: ${{SQLGAUGE_TEST_TOKEN}}
    timeoutMs: 2500
"""


@pytest.fixture
def config_path(
    tmp_path: Path, sample_config_yaml: str, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Write the sample config to disk, with the token in the environment."""
    monkeypatch.setenv("SQLGAUGE_TEST_TOKEN", "test-token")
    path = tmp_path / "config.yaml"
    path.write_text(sample_config_yaml)
    return path


@pytest.fixture
def config(config_path: Path):
    return load_config(config_path)
