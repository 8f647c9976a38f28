"""Tests for RemotePredictorClient: HTTP calls to the remote predictor."""

from __future__ import annotations

import json

import httpx
import pytest
from conftest import REMOTE_BODY, make_metrics, run_async

from medgluco.core.predictor.client import (
    PredictorConnectionError,
    PredictorRejectedError,
    PredictorResponseError,
    RemotePredictorClient,
    TransportError,
)
from medgluco.core.predictor.models import MalformedPredictionError, RemotePrediction
from medgluco.domains.diabetes.domain_logic.risk_models import DiabetesType

URL = "http://predictor.test/diabetes-prediction"


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

class _Recorder:
    """httpx.MockTransport handler that records requests and replays a response."""

    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None):
        self.response = response or httpx.Response(200, json=REMOTE_BODY)
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response


def _predict(handler: _Recorder):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await RemotePredictorClient(http, URL).predict(make_metrics())
    return run_async(_go())


# ------------------------------------------------------------------
# Tests: request
# ------------------------------------------------------------------

class TestRequest:
    def test_posts_json_body_to_url(self):
        handler = _Recorder()
        _predict(handler)

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert json.loads(request.content) == {
            "age": 50.0,
            "gender": "male",
            "glucose": 110.0,
            "bloodPressure": 80.0,
            "bmi": 27.0,
            "insulin": 12.0,
        }


# ------------------------------------------------------------------
# Tests: success
# ------------------------------------------------------------------

class TestSuccess:
    def test_parses_prediction(self):
        prediction = _predict(_Recorder())
        assert prediction.is_diabetic is True
        assert prediction.confidence == pytest.approx(0.7088)
        assert prediction.diabetes_type is DiabetesType.TYPE_2
        assert prediction.model_stages["stage4_ensemble_prediction"] == 0.725

    def test_to_diagnosis_drops_stages(self):
        diagnosis = _predict(_Recorder()).to_diagnosis()
        assert diagnosis.to_dict() == {
            "isDiabetic": True,
            "confidence": 0.7088,
            "diabetesType": "Type 2",
            "riskFactors": REMOTE_BODY["riskFactors"],
        }


# ------------------------------------------------------------------
# Tests: errors
# ------------------------------------------------------------------

class TestErrors:
    def test_connection_error(self):
        handler = _Recorder(exc=httpx.ConnectError("refused"))
        with pytest.raises(PredictorConnectionError, match="Failed to reach"):
            _predict(handler)

    def test_timeout_is_connection_error(self):
        handler = _Recorder(exc=httpx.ReadTimeout("slow"))
        with pytest.raises(PredictorConnectionError):
            _predict(handler)

    def test_remote_validation_error(self):
        body = {
            "error": "Invalid age range (1-120)",
            "isDiabetic": False,
            "confidence": 0,
            "diabetesType": None,
            "riskFactors": [],
        }
        handler = _Recorder(httpx.Response(400, json=body))
        with pytest.raises(PredictorRejectedError, match="Invalid age range"):
            _predict(handler)

    def test_server_error(self):
        handler = _Recorder(httpx.Response(503, text="unavailable"))
        with pytest.raises(PredictorConnectionError, match="HTTP 503"):
            _predict(handler)

    def test_invalid_json(self):
        handler = _Recorder(httpx.Response(200, text="not json"))
        with pytest.raises(PredictorResponseError, match="Invalid JSON"):
            _predict(handler)

    def test_non_object_json(self):
        handler = _Recorder(httpx.Response(200, json=[1, 2, 3]))
        with pytest.raises(PredictorResponseError, match="got list"):
            _predict(handler)

    def test_missing_fields(self):
        handler = _Recorder(httpx.Response(200, json={"isDiabetic": True}))
        with pytest.raises(PredictorResponseError, match="Malformed prediction"):
            _predict(handler)

    def test_all_errors_share_base(self):
        handler = _Recorder(exc=httpx.ConnectError("refused"))
        with pytest.raises(TransportError):
            _predict(handler)


# ------------------------------------------------------------------
# Tests: health check
# ------------------------------------------------------------------

class TestHealthCheck:
    def test_hits_sibling_health_route(self):
        handler = _Recorder(httpx.Response(200, json={"status": "ok"}))

        async def _go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                return await RemotePredictorClient(http, URL).health_check()

        assert run_async(_go()) == {"status": "ok"}
        assert str(handler.requests[0].url) == "http://predictor.test/health"


# ------------------------------------------------------------------
# Tests: RemotePrediction parsing
# ------------------------------------------------------------------

class TestRemotePredictionParsing:
    def test_null_type_is_none(self):
        body = {**REMOTE_BODY, "isDiabetic": False, "diabetesType": None, "riskFactors": []}
        assert RemotePrediction.from_dict(body).diabetes_type is DiabetesType.NONE

    def test_model_stages_are_optional(self):
        body = {k: v for k, v in REMOTE_BODY.items() if k != "modelStages"}
        assert RemotePrediction.from_dict(body).model_stages == {}

    @pytest.mark.parametrize(
        "override",
        [
            {"isDiabetic": 1},
            {"confidence": "0.7"},
            {"confidence": 1.5},
            {"confidence": True},
            {"diabetesType": "Type 3"},
            {"riskFactors": "glucose"},
            {"riskFactors": [1]},
            {"modelStages": [0.1]},
            {"confidence": 0.05},
            {"isDiabetic": False},
            {"diabetesType": None},
            {"isDiabetic": False, "diabetesType": None},
        ],
    )
    def test_rejects_off_contract_values(self, override):
        with pytest.raises(MalformedPredictionError):
            RemotePrediction.from_dict({**REMOTE_BODY, **override})


# ------------------------------------------------------------------
# Tests: lifecycle
# ------------------------------------------------------------------

class TestLifecycle:
    def test_aclose_closes_http_client(self):
        async def _go():
            http = httpx.AsyncClient(transport=httpx.MockTransport(_Recorder()))
            await RemotePredictorClient(http, URL).aclose()
            return http.is_closed

        assert run_async(_go()) is True
