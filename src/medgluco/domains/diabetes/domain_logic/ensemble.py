"""Stage 4: weighted ensemble with confidence calibration."""

from __future__ import annotations

from dataclasses import dataclass

from medgluco.domains.diabetes.domain_logic.risk_models import (
    DIABETIC_THRESHOLD,
    ENSEMBLE_WEIGHTS,
    MAX_CONFIDENCE_PENALTY,
    MIN_CONFIDENCE,
    TYPE1_MAX_DEMOGRAPHIC,
    TYPE1_MIN_METABOLIC,
    VARIANCE_PENALTY_FACTOR,
    DiabetesType,
    DiagnosisResult,
    StageScore,
)


@dataclass(frozen=True)
class EnsembleOutcome:
    """Combined score plus the public diagnosis derived from it."""

    score: float
    diagnosis: DiagnosisResult


def ensemble_score(glucose: float, metabolic: float, demographic: float) -> float:
    """Weighted combination of the three stage scores."""
    return (
        glucose * ENSEMBLE_WEIGHTS["glucose"]
        + metabolic * ENSEMBLE_WEIGHTS["metabolic"]
        + demographic * ENSEMBLE_WEIGHTS["demographic"]
    )


def calibrate_confidence(score: float, stage_scores: tuple[float, ...]) -> float:
    """Lower the ensemble score by how much the stages disagree with it.

    The penalty is 0.1x the summed squared deviation, capped at 0.2, and the
    calibrated value never drops below ``MIN_CONFIDENCE``.
    """
    variance = sum((s - score) ** 2 for s in stage_scores)
    penalty = min(variance * VARIANCE_PENALTY_FACTOR, MAX_CONFIDENCE_PENALTY)
    return max(score - penalty, MIN_CONFIDENCE)


def combine_stages(
    glucose: StageScore, metabolic: StageScore, demographic: StageScore
) -> EnsembleOutcome:
    """Merge the three stage results into a diagnosis.

    Risk factors are concatenated in stage order (glucose, metabolic,
    demographic) and only exposed for a positive classification.
    """
    g, m, d = glucose.score, metabolic.score, demographic.score
    score = ensemble_score(g, m, d)
    confidence = calibrate_confidence(score, (g, m, d))
    is_diabetic = score > DIABETIC_THRESHOLD

    if not is_diabetic:
        return EnsembleOutcome(
            score=score,
            diagnosis=DiagnosisResult(is_diabetic=False, confidence=confidence),
        )

    if d < TYPE1_MAX_DEMOGRAPHIC and m > TYPE1_MIN_METABOLIC:
        diabetes_type = DiabetesType.TYPE_1
    else:
        diabetes_type = DiabetesType.TYPE_2

    return EnsembleOutcome(
        score=score,
        diagnosis=DiagnosisResult(
            is_diabetic=True,
            confidence=confidence,
            diabetes_type=diabetes_type,
            risk_factors=glucose.factors + metabolic.factors + demographic.factors,
        ),
    )
