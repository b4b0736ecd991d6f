"""Basic usage example for SQLGauge.

runs against an in-memory duckdb and only previews the payload, so it works
offline without a token or a warehouse.
"""

import sys
from pathlib import Path

# Add parent to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlgauge.models.config import RelayConfig
from sqlgauge.relay import Relay


def main():
    """Map a couple of literal rows and print what would be sent."""
    config = RelayConfig.model_validate(
        {
            "receivers": {
                "smartagent/sql": {
                    "dbDriver": "duckdb",
                    "queries": [
                        {
                            "query": """
                                SELECT * FROM (VALUES
                                    ('10.5', 'us-east', TIMESTAMP '2024-01-01 00:00:00'),
                                    ('7.25', 'eu-west', TIMESTAMP '2024-01-01 00:00:00')
                                ) AS t(VAL, REGION, EVENT_AT)
                            """,
                            "metrics": [
                                {
                                    "metricName": "cpu.load",
                                    "valueColumn": "VAL",
                                    "dimensionColumns": ["REGION"],
                                }
                            ],
                        }
                    ],
                }
            },
            "exporters": {"signalfx": {"authToken": "not-a-real-token"}},
        }
    )

    with Relay(config) as relay:
        for index, points in enumerate(relay.collect()):
            print(f"Query #{index}: {len(points)} data points")
            print(relay.client.preview(points))


if __name__ == "__main__":
    main()
