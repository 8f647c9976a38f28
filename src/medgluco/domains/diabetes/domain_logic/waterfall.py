"""Waterfall cascade: three independent stages feeding the ensemble."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from medgluco.domains.diabetes.domain_logic.ensemble import combine_stages
from medgluco.domains.diabetes.domain_logic.metrics import HealthMetrics
from medgluco.domains.diabetes.domain_logic.risk_models import DiagnosisResult
from medgluco.domains.diabetes.domain_logic.stages import (
    demographic_risk,
    glucose_screening,
    metabolic_assessment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelStages:
    """Per-stage scores, exposed for debugging only."""

    glucose_screening: float
    metabolic_assessment: float
    demographic_risk: float
    ensemble_prediction: float

    def to_dict(self) -> dict[str, float]:
        return {
            "stage1_glucose_screening": self.glucose_screening,
            "stage2_metabolic_assessment": self.metabolic_assessment,
            "stage3_demographic_risk": self.demographic_risk,
            "stage4_ensemble_prediction": self.ensemble_prediction,
        }


@dataclass(frozen=True)
class WaterfallPrediction:
    """Diagnosis plus the stage breakdown that produced it."""

    diagnosis: DiagnosisResult
    stages: ModelStages

    def to_dict(self) -> dict[str, Any]:
        """Return the remote predictor's success response body."""
        body = self.diagnosis.to_dict()
        body["modelStages"] = self.stages.to_dict()
        return body


def run_waterfall(metrics: HealthMetrics) -> WaterfallPrediction:
    """Run all four stages for one set of validated metrics."""
    glucose = glucose_screening(metrics.glucose)
    logger.debug("Stage 1 (glucose screening): %s", glucose)

    metabolic = metabolic_assessment(metrics.bmi, metrics.blood_pressure, metrics.insulin)
    logger.debug("Stage 2 (metabolic assessment): %s", metabolic)

    demographic = demographic_risk(metrics.age, metrics.gender, metrics.bmi)
    logger.debug("Stage 3 (demographic risk): %s", demographic)

    outcome = combine_stages(glucose, metabolic, demographic)
    logger.debug(
        "Stage 4 (ensemble): score=%.4f confidence=%.4f type=%s",
        outcome.score,
        outcome.diagnosis.confidence,
        outcome.diagnosis.diabetes_type.label,
    )

    return WaterfallPrediction(
        diagnosis=outcome.diagnosis,
        stages=ModelStages(
            glucose_screening=glucose.score,
            metabolic_assessment=metabolic.score,
            demographic_risk=demographic.score,
            ensemble_prediction=outcome.score,
        ),
    )
