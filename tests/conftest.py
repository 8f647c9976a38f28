"""Shared test fixtures for MedGluco tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMOTE_PREDICTOR_URL", "http://127.0.0.1:8003/diabetes-prediction")
    monkeypatch.setenv("REMOTE_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("FALLBACK_DELAY_SECONDS", "0")
    monkeypatch.setenv("CORS_ALLOW_ORIGIN", "*")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from medgluco.core.predictor.models import RemotePrediction  # noqa: E402
from medgluco.domains.diabetes.domain_logic.metrics import (  # noqa: E402
    HealthMetrics,
    validate_metrics,
)


def run_async(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def make_metrics(
    age: float = 50,
    gender: str = "male",
    glucose: float = 110,
    blood_pressure: float = 80,
    bmi: float = 27,
    insulin: float = 12,
) -> HealthMetrics:
    """Create validated metrics with sensible defaults."""
    return validate_metrics(
        {
            "age": age,
            "gender": gender,
            "glucose": glucose,
            "bloodPressure": blood_pressure,
            "bmi": bmi,
            "insulin": insulin,
        }
    )


class FixedRandom:
    """Stand-in for random.Random whose uniform() always returns one value."""

    def __init__(self, value: float | None = None) -> None:
        self.value = value
        self.calls: list[tuple[float, float]] = []

    def uniform(self, a: float, b: float) -> float:
        self.calls.append((a, b))
        return (a + b) / 2 if self.value is None else self.value


# ---------------------------------------------------------------------------
# Fake remote predictors
# ---------------------------------------------------------------------------

REMOTE_BODY: dict[str, Any] = {
    "isDiabetic": True,
    "confidence": 0.7088,
    "diabetesType": "Type 2",
    "riskFactors": ["Fasting glucose ≥126 mg/dL - Diabetes threshold"],
    "modelStages": {
        "stage1_glucose_screening": 0.8,
        "stage2_metabolic_assessment": 0.85,
        "stage3_demographic_risk": 0.35,
        "stage4_ensemble_prediction": 0.725,
    },
}


class FakeRemote:
    """Remote predictor double: returns a canned prediction or raises."""

    def __init__(
        self,
        body: dict[str, Any] | None = None,
        exc: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self._body = body or REMOTE_BODY
        self._exc = exc
        self._delay = delay
        self.calls: list[HealthMetrics] = []

    async def predict(self, metrics: HealthMetrics) -> RemotePrediction:
        self.calls.append(metrics)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._exc is not None:
            raise self._exc
        return RemotePrediction.from_dict(self._body)


@pytest.fixture
def fixed_random() -> FixedRandom:
    """Zero-jitter random source."""
    return FixedRandom()


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()
