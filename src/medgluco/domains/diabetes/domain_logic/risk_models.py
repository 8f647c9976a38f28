"""Diabetes risk models and scoring constants shared by both scorers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Waterfall ensemble constants (used by ensemble.py)
# ---------------------------------------------------------------------------

# Glucose carries the most weight as the primary biomarker.
ENSEMBLE_WEIGHTS = {
    "glucose": 0.5,
    "metabolic": 0.3,
    "demographic": 0.2,
}

DIABETIC_THRESHOLD = 0.5        # Ensemble score (or fallback confidence) must exceed this
VARIANCE_PENALTY_FACTOR = 0.1
MAX_CONFIDENCE_PENALTY = 0.2
MIN_CONFIDENCE = 0.1            # Floor applied to every reported confidence

# Type 1 pattern: low demographic risk combined with a strong metabolic signal
TYPE1_MAX_DEMOGRAPHIC = 0.2
TYPE1_MIN_METABOLIC = 0.3

# ---------------------------------------------------------------------------
# Local fallback constants (used by local_fallback.py)
# ---------------------------------------------------------------------------

FALLBACK_JITTER = 0.05          # Confidence = score + U(-0.05, +0.05)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

class DiabetesType(Enum):
    """Predicted diabetes subtype. ``NONE`` when no diagnosis is made."""

    TYPE_1 = "Type 1"
    TYPE_2 = "Type 2"
    NONE = None

    @classmethod
    def from_label(cls, label: str | None) -> DiabetesType:
        """Parse a wire label ("Type 1", "Type 2" or null)."""
        for member in cls:
            if member.value == label:
                return member
        raise ValueError(f"Unknown diabetes type label: {label!r}")

    @property
    def label(self) -> str | None:
        return self.value


@dataclass(frozen=True)
class StageScore:
    """Partial score from one waterfall stage."""

    score: float                                  # 0-1
    factors: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DiagnosisResult:
    """Externally visible outcome of a diabetes risk assessment."""

    is_diabetic: bool
    confidence: float                             # 0.1-1
    diabetes_type: DiabetesType = DiabetesType.NONE
    risk_factors: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire shape consumed by the presentation layer."""
        return {
            "isDiabetic": self.is_diabetic,
            "confidence": self.confidence,
            "diabetesType": self.diabetes_type.label,
            "riskFactors": list(self.risk_factors),
        }
