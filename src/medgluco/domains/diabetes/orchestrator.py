"""Prediction orchestrator: remote waterfall first, local fallback on any failure."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Literal, Protocol

from medgluco.core.predictor.models import RemotePrediction
from medgluco.domains.diabetes.domain_logic.local_fallback import LocalFallbackScorer
from medgluco.domains.diabetes.domain_logic.metrics import HealthMetrics
from medgluco.domains.diabetes.domain_logic.risk_models import DiagnosisResult

logger = logging.getLogger(__name__)

PredictionSource = Literal["remote", "local_fallback"]


class RemotePredictor(Protocol):
    async def predict(self, metrics: HealthMetrics) -> RemotePrediction: ...


class PredictionOrchestrator:
    """Always returns a diagnosis for validated metrics.

    The remote predictor is called exactly once per request, bounded by
    ``timeout_seconds``. If it raises, times out or returns something
    unusable, the error is logged and the local fallback result is returned
    after ``fallback_delay_seconds``.
    """

    def __init__(
        self,
        remote: RemotePredictor | None,
        *,
        fallback_scorer: LocalFallbackScorer | None = None,
        timeout_seconds: float = 8.0,
        fallback_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._remote = remote
        self._fallback = fallback_scorer or LocalFallbackScorer()
        self._timeout = timeout_seconds
        self._fallback_delay = fallback_delay_seconds
        self._sleep = sleep

    async def predict(self, metrics: HealthMetrics) -> DiagnosisResult:
        result, _ = await self.predict_with_source(metrics)
        return result

    async def predict_with_source(
        self, metrics: HealthMetrics
    ) -> tuple[DiagnosisResult, PredictionSource]:
        """Like ``predict`` but also reports which scorer produced the result."""
        if self._remote is not None:
            try:
                prediction = await asyncio.wait_for(
                    self._remote.predict(metrics), timeout=self._timeout
                )
                return prediction.to_diagnosis(), "remote"
            except asyncio.TimeoutError:
                logger.warning(
                    "Remote predictor timed out after %.1fs; using local fallback",
                    self._timeout,
                )
            except Exception as exc:
                logger.warning(
                    "Remote predictor failed (%s: %s); using local fallback",
                    type(exc).__name__,
                    exc,
                )
        else:
            logger.info("No remote predictor configured; using local fallback")

        await self._sleep(self._fallback_delay)
        return self._fallback.score(metrics), "local_fallback"
