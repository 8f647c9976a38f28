"""Response models for the remote diabetes prediction service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from medgluco.domains.diabetes.domain_logic.risk_models import (
    MIN_CONFIDENCE,
    DiabetesType,
    DiagnosisResult,
)

STAGE_KEYS = (
    "stage1_glucose_screening",
    "stage2_metabolic_assessment",
    "stage3_demographic_risk",
    "stage4_ensemble_prediction",
)


class MalformedPredictionError(ValueError):
    """A response body does not match the prediction contract."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class RemotePrediction:
    """Parsed success response from the remote predictor."""

    is_diabetic: bool
    confidence: float
    diabetes_type: DiabetesType
    risk_factors: list[str]
    model_stages: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> RemotePrediction:
        """Parse a raw response body, rejecting anything off-contract."""
        is_diabetic = data.get("isDiabetic")
        if not isinstance(is_diabetic, bool):
            raise MalformedPredictionError("'isDiabetic' must be a boolean")

        confidence = data.get("confidence")
        if not _is_number(confidence) or not 0.0 <= confidence <= 1.0:
            raise MalformedPredictionError("'confidence' must be a number in [0, 1]")

        try:
            diabetes_type = DiabetesType.from_label(data.get("diabetesType"))
        except ValueError as exc:
            raise MalformedPredictionError(str(exc)) from exc

        risk_factors = data.get("riskFactors")
        if not isinstance(risk_factors, list) or not all(
            isinstance(f, str) for f in risk_factors
        ):
            raise MalformedPredictionError("'riskFactors' must be a list of strings")

        stages = data.get("modelStages") or {}
        if not isinstance(stages, dict):
            raise MalformedPredictionError("'modelStages' must be an object")

        if confidence < MIN_CONFIDENCE:
            raise MalformedPredictionError(
                f"'confidence' {confidence} is below the {MIN_CONFIDENCE} floor"
            )
        if (diabetes_type is not DiabetesType.NONE) != is_diabetic:
            raise MalformedPredictionError(
                "'diabetesType' must be set exactly when 'isDiabetic' is true"
            )
        if risk_factors and not is_diabetic:
            raise MalformedPredictionError("'riskFactors' must be empty for a negative result")

        return cls(
            is_diabetic=is_diabetic,
            confidence=float(confidence),
            diabetes_type=diabetes_type,
            risk_factors=list(risk_factors),
            model_stages={k: float(stages[k]) for k in STAGE_KEYS if _is_number(stages.get(k))},
        )

    def to_diagnosis(self) -> DiagnosisResult:
        """Re-shape to the caller-facing contract, dropping the stage breakdown."""
        return DiagnosisResult(
            is_diabetic=self.is_diabetic,
            confidence=self.confidence,
            diabetes_type=self.diabetes_type,
            risk_factors=tuple(self.risk_factors),
        )
