"""Remote waterfall predictor: FastAPI application factory.

Serves ``POST /diabetes-prediction``. Every response, including errors and
the ``OPTIONS`` preflight, carries the same permissive CORS headers.

Run with: uvicorn medgluco.core.server.predictor_app:app --port 8003
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from medgluco.core.config.settings import get_settings
from medgluco.domains.diabetes.domain_logic.metrics import (
    REMOTE_RANGES,
    ValidationError,
    validate_metrics,
)
from medgluco.domains.diabetes.domain_logic.waterfall import run_waterfall

logger = logging.getLogger(__name__)

PREDICTION_PATH = "/diabetes-prediction"
CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


def _error_body(message: str) -> dict[str, Any]:
    return {
        "error": message,
        "isDiabetic": False,
        "confidence": 0,
        "diabetesType": None,
        "riskFactors": [],
    }


def create_predictor_app(*, cors_allow_origin: str | None = None) -> FastAPI:
    """Create the remote predictor ASGI app."""
    if cors_allow_origin is None:
        cors_allow_origin = get_settings().cors_allow_origin

    cors_headers = {
        "Access-Control-Allow-Origin": cors_allow_origin,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }

    app = FastAPI(title="MedGluco Diabetes Prediction", version="0.1.0")

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(cors_headers)
        return response

    @app.options(PREDICTION_PATH)
    async def prediction_preflight() -> Response:
        return Response(status_code=200)

    @app.post(PREDICTION_PATH)
    async def diabetes_prediction(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if not isinstance(body, dict):
            return JSONResponse(
                _error_body("Request body must be a JSON object"), status_code=400
            )

        try:
            metrics = validate_metrics(body, REMOTE_RANGES)
        except ValidationError as exc:
            logger.info("Rejected prediction request: %s", exc)
            return JSONResponse(_error_body(str(exc)), status_code=400)

        prediction = run_waterfall(metrics)
        logger.info(
            "Prediction served: diabetic=%s confidence=%.4f",
            prediction.diagnosis.is_diabetic,
            prediction.diagnosis.confidence,
        )
        return JSONResponse(prediction.to_dict())

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": "diabetes-prediction"}

    return app


# Module-level instance for `uvicorn ...predictor_app:app`; lazy so that tests
# importing create_predictor_app do not read settings at import time.
def __getattr__(name: str):
    if name == "app":
        global app  # noqa: PLW0603
        app = create_predictor_app()
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
