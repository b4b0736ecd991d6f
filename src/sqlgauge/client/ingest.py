"""HTTP client for the SignalFx / Splunk Observability ingest api."""

import logging

import requests
from pydantic_core import PydanticSerializationError

from sqlgauge.errors import DeliveryError
from sqlgauge.models.config import IngestSettings
from sqlgauge.models.datapoint import DataPoint, GaugeBatch

logger = logging.getLogger(__name__)


class IngestClient:
    """Posts gauge batches to the datapoint endpoint.

    one POST per batch, no retries. the response status is reported back to
    the caller but a 4xx/5xx is not treated as an error - the ingest api is
    the source of truth on whether it liked the payload.
    """

    def __init__(self, settings: IngestSettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Splunk {self.settings.auth_token}",
            "Content-Type": "application/json",
        }

    def serialize(self, points: list[DataPoint], indent: int | None = None) -> str:
        """Render the request body: {"gauge": [...]}."""
        try:
            return GaugeBatch(gauge=points).model_dump_json(indent=indent)
        except PydanticSerializationError as e:
            raise DeliveryError(f"Failed to marshal event to JSON: {e}") from e

    def preview(self, points: list[DataPoint]) -> str:
        """Pretty-printed body, for dry runs."""
        return self.serialize(points, indent=2)

    def send(self, points: list[DataPoint]) -> requests.Response:
        """POST one batch and return the response, whatever its status."""
        body = self.serialize(points)
        logger.debug("Sending %d data points to %s", len(points), self.settings.endpoint)

        try:
            response = self.session.post(
                self.settings.endpoint,
                data=body.encode("utf-8"),
                headers=self.headers(),
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Failed to send HTTP request: {e}") from e

        logger.info("Ingest response: %s %s", response.status_code, response.reason)
        return response

    def close(self) -> None:
        self.session.close()
