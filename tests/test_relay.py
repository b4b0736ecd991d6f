"""Integration tests for the Relay."""

import json
from pathlib import Path

import pytest

from sqlgauge.client.ingest import IngestClient
from sqlgauge.errors import DatabaseConnectionError, DeliveryError, MappingError, QueryError
from sqlgauge.models.config import RelayConfig
from sqlgauge.parser.loader import load_config
from sqlgauge.relay import Relay

from conftest import FakeSession


def relay_for(config: RelayConfig, session: FakeSession) -> Relay:
    return Relay(config, client=IngestClient(config.ingest, session=session))


def with_queries(config: RelayConfig, queries: list[dict]) -> RelayConfig:
    data = config.model_dump(by_alias=True)
    data["receivers"]["smartagent/sql"]["queries"] = queries
    return RelayConfig.model_validate(data)


def bodies(session: FakeSession) -> list[dict]:
    return [json.loads(call["data"]) for call in session.calls]


class TestRelay:
    def test_from_file(self, config_path: Path):
        relay = Relay.from_file(config_path)
        assert len(relay.config.sql.queries) == 2
        relay.close()

    def test_one_post_per_query_in_order(self, config, fake_session):
        report = relay_for(config, fake_session).run()

        assert report.ok
        assert [b.index for b in report.batches] == [0, 1]
        assert len(fake_session.calls) == 2
        assert [b.status for b in report.batches] == ["200 OK", "200 OK"]

    def test_points_per_query(self, config, fake_session):
        """3 rows x 2 metrics, then 1 row x 1 metric."""
        report = relay_for(config, fake_session).run()

        assert [b.point_count for b in report.batches] == [6, 1]
        assert report.total_points == 7
        first, second = bodies(fake_session)
        assert len(first["gauge"]) == 6
        assert len(second["gauge"]) == 1

    def test_scenario_payload(self, config, fake_session):
        relay_for(config, fake_session).run()
        second = bodies(fake_session)[1]

        assert second == {
            "gauge": [
                {
                    "metric": "cpu.load",
                    "value": 10.5,
                    "dimensions": {"REGION": "us-east"},
                    "timestamp": 1704067200000,
                }
            ]
        }

    def test_timestamps_from_table(self, config, fake_session):
        relay_for(config, fake_session).run()
        gauges = bodies(fake_session)[0]["gauge"]

        assert [g["timestamp"] for g in gauges[:3]] == [
            1704067200000,
            1704067260000,
            1704067320000,
        ]
        # second metric has no dimensions configured
        assert all(g["dimensions"] == {} for g in gauges[3:])

    def test_zero_rows_posts_empty_gauge(self, config, fake_session):
        config = with_queries(
            config,
            [
                {
                    "query": "SELECT * FROM readings WHERE 1 = 0",
                    "metrics": [{"metricName": "m", "valueColumn": "VAL"}],
                }
            ],
        )
        report = relay_for(config, fake_session).run()

        assert bodies(fake_session) == [{"gauge": []}]
        assert report.batches[0].point_count == 0

    def test_bad_value_fails_before_any_post(self, config, fake_session):
        config = with_queries(
            config,
            [
                {
                    "query": "SELECT 'abc' AS VAL, TIMESTAMP '2024-01-01 00:00:00' AS EVENT_AT",
                    "metrics": [{"metricName": "m", "valueColumn": "VAL"}],
                }
            ],
        )
        with pytest.raises(MappingError, match="VAL"):
            relay_for(config, fake_session).run()

        assert fake_session.calls == []

    def test_error_stops_remaining_queries(self, config, fake_session):
        config = with_queries(
            config,
            [
                {"query": "SELECT * FROM no_such_table", "metrics": []},
                {"query": "SELECT 1 AS x", "metrics": []},
            ],
        )
        with pytest.raises(QueryError):
            relay_for(config, fake_session).run()
        assert fake_session.calls == []

    def test_error_status_does_not_fail(self, config):
        session = FakeSession(status_code=400, reason="Bad Request")
        report = relay_for(config, session).run()

        assert report.ok
        assert report.batches[0].status_code == 400
        assert report.batches[0].status == "400 Bad Request"

    def test_on_batch_called_per_query(self, config, fake_session):
        seen = []
        relay_for(config, fake_session).run(on_batch=seen.append)
        assert [b.index for b in seen] == [0, 1]

    def test_connection_closed_after_run(self, config, fake_session):
        relay = relay_for(config, fake_session)
        relay.run()
        assert relay.executor._duck is None


class TestRelayKeepGoing:
    def test_failed_query_recorded_and_next_runs(self, config, fake_session):
        config = with_queries(
            config,
            [
                {"query": "SELECT * FROM no_such_table", "metrics": []},
                {
                    "query": "SELECT 'abc' AS VAL, TIMESTAMP '2024-01-01 00:00:00' AS EVENT_AT",
                    "metrics": [{"metricName": "m", "valueColumn": "VAL"}],
                },
                {
                    "query": "SELECT VAL, EVENT_AT FROM readings",
                    "metrics": [{"metricName": "m", "valueColumn": "VAL"}],
                },
            ],
        )
        seen = []
        report = relay_for(config, fake_session).run(fail_fast=False, on_batch=seen.append)

        assert not report.ok
        assert [b.index for b in report.failed] == [0, 1]
        assert report.batches[0].error.startswith("query error:")
        assert report.batches[1].error.startswith("mapping error:")
        assert report.batches[2].ok
        assert len(fake_session.calls) == 1
        assert len(seen) == 3

    def test_delivery_error_recorded(self, config):
        session = FakeSession(error=DeliveryError("boom"))
        report = relay_for(config, session).run(fail_fast=False)

        assert len(report.failed) == 2
        assert len(session.calls) == 2

    def test_connection_error_always_raises(self, config, fake_session, tmp_path: Path):
        data = config.model_dump(by_alias=True)
        data["receivers"]["smartagent/sql"]["params"]["database"] = str(
            tmp_path / "missing" / "x.duckdb"
        )
        broken = RelayConfig.model_validate(data)

        with pytest.raises(DatabaseConnectionError):
            relay_for(broken, fake_session).run(fail_fast=False)


class TestCollect:
    def test_collect_does_not_send(self, config, fake_session):
        batches = relay_for(config, fake_session).collect()

        assert [len(points) for points in batches] == [6, 1]
        assert fake_session.calls == []


class TestRelaySqlPassthrough:
    def test_dollar_names_reach_executor_unchanged(
        self, tmp_path: Path, fake_session, monkeypatch: pytest.MonkeyPatch
    ):
        """A query mentioning $NAME runs as written even with NAME set."""
        monkeypatch.setenv("REGION_NAME", "us-east")
        path = tmp_path / "config.yaml"
        path.write_text("""
receivers:
  smartagent/sql:
    dbDriver: duckdb
    queries:
      - query: SELECT '$REGION_NAME' AS REGION, '1' AS VAL, '2024-01-01T00:00:00Z' AS EVENT_AT
        metrics:
          - metricName: m
            valueColumn: VAL
            dimensionColumns: [REGION]
exporters:
  signalfx:
    authToken: tok
""")
        config = load_config(path)
        relay_for(config, fake_session).run()

        assert bodies(fake_session)[0]["gauge"][0]["dimensions"] == {"REGION": "$REGION_NAME"}
