"""HTTP client for the remote diabetes prediction service.

Wraps the single ``POST /diabetes-prediction`` call and turns every way it
can go wrong into a ``TransportError`` subclass, so the orchestrator has one
exception family to fall back on.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from medgluco.core.predictor.models import MalformedPredictionError, RemotePrediction
from medgluco.domains.diabetes.domain_logic.metrics import HealthMetrics

logger = logging.getLogger(__name__)


class RemotePredictorClient:
    """Client for the remote waterfall predictor.

    Usage::

        async with httpx.AsyncClient(timeout=8.0) as http:
            remote = RemotePredictorClient(http, "http://127.0.0.1:8003/diabetes-prediction")
            prediction = await remote.predict(metrics)
            result = prediction.to_diagnosis()
    """

    def __init__(self, http_client: httpx.AsyncClient, url: str) -> None:
        self._http = http_client
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def predict(self, metrics: HealthMetrics) -> RemotePrediction:
        """Score metrics remotely.

        Raises:
            PredictorConnectionError: service unreachable or timed out.
            PredictorRejectedError: service answered 400 with an error body.
            PredictorResponseError: any other unexpected response.
        """
        data = await self._post(metrics.as_request_body())
        try:
            return RemotePrediction.from_dict(data)
        except MalformedPredictionError as exc:
            raise PredictorResponseError(f"Malformed prediction: {exc}") from exc

    async def health_check(self) -> dict[str, Any]:
        """Verify the predictor is reachable and report its status."""
        health_url = self._url.rsplit("/", 1)[0] + "/health"
        try:
            response = await self._http.get(health_url)
        except httpx.HTTPError as exc:
            raise PredictorConnectionError(
                f"Predictor health check failed: {type(exc).__name__}"
            ) from exc
        return _decode_object(response, "health check")

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Calling remote predictor at %s", self._url)

        try:
            response = await self._http.post(self._url, json=body)
        except httpx.HTTPError as exc:
            raise PredictorConnectionError(
                f"Failed to reach remote predictor at {self._url}: {type(exc).__name__}"
            ) from exc

        if response.status_code == 400:
            data = _decode_object(response, "prediction")
            raise PredictorRejectedError(_format_error(data.get("error")))

        if response.status_code != 200:
            raise PredictorConnectionError(
                f"Remote predictor returned HTTP {response.status_code}"
            )

        return _decode_object(response, "prediction")


# ------------------------------------------------------------------
# Exceptions
# ------------------------------------------------------------------

class TransportError(Exception):
    """Base exception for remote predictor failures."""


class PredictorConnectionError(TransportError):
    """Could not reach the remote predictor, or it failed at the HTTP level."""


class PredictorResponseError(TransportError):
    """Response from the remote predictor was unexpected."""


class PredictorRejectedError(TransportError):
    """The remote predictor rejected the metrics (validation error)."""


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _decode_object(response: httpx.Response, what: str) -> dict[str, Any]:
    """Decode a JSON object body or raise ``PredictorResponseError``."""
    try:
        parsed: Any = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PredictorResponseError(f"Invalid JSON in {what} response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise PredictorResponseError(
            f"Expected JSON object in {what} response, got {type(parsed).__name__}"
        )
    return parsed


def _format_error(error: Any) -> str:
    """Format an error payload from the predictor into a readable string."""
    if error is None:
        return "Unknown error"
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        msg = error.get("message") or error.get("code")
        return msg if isinstance(msg, str) and msg else str(error)
    return str(error)
