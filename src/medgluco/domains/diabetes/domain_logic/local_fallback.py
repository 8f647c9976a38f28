"""Local fallback scorer used when the remote predictor is unavailable.

A single-pass weighted sum with its own, coarser thresholds. It is not a
refactor of the waterfall stages and deliberately keeps different weights.
Confidence carries uniform jitter from an injectable random source, so the
same metrics can score slightly differently between calls.
"""

from __future__ import annotations

import logging
import random

from medgluco.domains.diabetes.domain_logic.metrics import Gender, HealthMetrics
from medgluco.domains.diabetes.domain_logic.risk_models import (
    DIABETIC_THRESHOLD,
    FALLBACK_JITTER,
    MIN_CONFIDENCE,
    DiabetesType,
    DiagnosisResult,
)

logger = logging.getLogger(__name__)


def fallback_risk_score(metrics: HealthMetrics) -> tuple[float, list[str]]:
    """Compute the pre-jitter score and triggered factors.

    Returns:
        (score clamped to [0, 1], factor strings in rule order)
    """
    age, bmi, glucose = metrics.age, metrics.bmi, metrics.glucose
    score = 0.0
    factors: list[str] = []

    if glucose >= 126:
        score += 0.4
        factors.append("Elevated fasting glucose level (≥126 mg/dL)")
    elif glucose >= 100:
        score += 0.2
        factors.append("Pre-diabetic glucose range (100-125 mg/dL)")

    if bmi >= 30:
        score += 0.25
        factors.append("Obesity (BMI ≥30)")
    elif bmi >= 25:
        score += 0.15
        factors.append("Overweight (BMI 25-29.9)")

    if age >= 45:
        score += 0.15
        factors.append("Age ≥45 years")
    elif age >= 35:
        score += 0.1

    if metrics.blood_pressure >= 90:
        score += 0.1
        factors.append("High diastolic blood pressure (≥90 mmHg)")
    elif metrics.blood_pressure >= 80:
        score += 0.05

    if metrics.insulin > 25 or metrics.insulin < 2:
        score += 0.1
        factors.append("Abnormal insulin levels")

    if metrics.gender is Gender.MALE and bmi > 28:
        score += 0.05
        factors.append("Male gender with elevated BMI")
    elif metrics.gender is Gender.FEMALE and age > 35 and bmi > 25:
        score += 0.03
        factors.append("Female gender with age and weight factors")

    # Combined-pattern bonus, stacks on the individual rules
    if glucose > 140 and bmi > 25 and age > 40:
        score += 0.1

    return min(score, 1.0), factors


class LocalFallbackScorer:
    """Scores metrics locally; never fails on validated input.

    Args:
        rng: Source of jitter. Anything with ``uniform(a, b)``; defaults to
            a fresh ``random.Random``. Pass a seeded instance in tests.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def score(self, metrics: HealthMetrics) -> DiagnosisResult:
        risk_score, factors = fallback_risk_score(metrics)
        jitter = self._rng.uniform(-FALLBACK_JITTER, FALLBACK_JITTER)
        confidence = max(min(risk_score + jitter, 1.0), MIN_CONFIDENCE)
        is_diabetic = confidence > DIABETIC_THRESHOLD

        logger.debug(
            "Local fallback: score=%.4f jitter=%+.4f confidence=%.4f",
            risk_score, jitter, confidence,
        )

        if not is_diabetic:
            return DiagnosisResult(is_diabetic=False, confidence=confidence)

        if metrics.age < 30 and metrics.insulin < 10:
            diabetes_type = DiabetesType.TYPE_1
        else:
            diabetes_type = DiabetesType.TYPE_2

        return DiagnosisResult(
            is_diabetic=True,
            confidence=confidence,
            diabetes_type=diabetes_type,
            risk_factors=tuple(factors),
        )
