"""Waterfall scoring stages: raw metrics -> partial risk scores.

Each stage is a pure function returning a ``StageScore`` whose factors list
the triggered rules in evaluation order. Tier ladders are checked from the
highest threshold down and the first match wins. Scores are clamped to
[0, 1]. All rules are deterministic.
"""

from __future__ import annotations

from medgluco.domains.diabetes.domain_logic.metrics import Gender
from medgluco.domains.diabetes.domain_logic.risk_models import StageScore


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Stage 1: Glucose Screening (primary biomarker)
# ---------------------------------------------------------------------------

# (threshold, score, factor) checked high-to-low
GLUCOSE_TIERS: tuple[tuple[float, float, str], ...] = (
    (200, 0.95, "Severely elevated glucose (≥200 mg/dL) - Immediate diabetes indicator"),
    (126, 0.80, "Fasting glucose ≥126 mg/dL - Diabetes threshold"),
    (100, 0.40, "Impaired fasting glucose (100-125 mg/dL) - Pre-diabetes"),
    (90, 0.20, "Borderline glucose levels (90-99 mg/dL)"),
)
GLUCOSE_BASELINE = 0.10


def glucose_screening(glucose: float) -> StageScore:
    """Score fasting glucose on a tiered lookup. Below 90 mg/dL emits no factor."""
    for threshold, score, factor in GLUCOSE_TIERS:
        if glucose >= threshold:
            return StageScore(score=score, factors=(factor,))
    return StageScore(score=GLUCOSE_BASELINE)


# ---------------------------------------------------------------------------
# Stage 2: Metabolic Assessment
# ---------------------------------------------------------------------------

def metabolic_assessment(bmi: float, blood_pressure: float, insulin: float) -> StageScore:
    """Score BMI, diastolic blood pressure and insulin additively.

    Sub-rules:
        BMI (WHO classes): >=35 +0.40, >=30 +0.30, >=25 +0.20
        Diastolic BP: >=90 +0.25, >=85 +0.15
        Insulin: >25 +0.30, <2 +0.35, otherwise >15 +0.15
    """
    score = 0.0
    factors: list[str] = []

    # --- BMI ---
    if bmi >= 35:
        score += 0.40
        factors.append("Severe obesity (BMI ≥35) - High metabolic risk")
    elif bmi >= 30:
        score += 0.30
        factors.append("Obesity (BMI 30-34.9) - Increased insulin resistance")
    elif bmi >= 25:
        score += 0.20
        factors.append("Overweight (BMI 25-29.9) - Moderate risk")

    # --- Blood pressure ---
    if blood_pressure >= 90:
        score += 0.25
        factors.append("Hypertension (≥90 mmHg) - Metabolic syndrome indicator")
    elif blood_pressure >= 85:
        score += 0.15
        factors.append("High-normal blood pressure (85-89 mmHg)")

    # --- Insulin ---
    if insulin > 25:
        score += 0.30
        factors.append("Hyperinsulinemia (>25 μU/mL) - Insulin resistance")
    elif insulin < 2:
        score += 0.35
        factors.append("Very low insulin (<2 μU/mL) - Possible beta-cell dysfunction")
    elif insulin > 15:
        score += 0.15
        factors.append("Elevated insulin levels (>15 μU/mL)")

    return StageScore(score=_clamp(score), factors=tuple(factors))


# ---------------------------------------------------------------------------
# Stage 3: Demographic Risk
# ---------------------------------------------------------------------------

def demographic_risk(age: float, gender: Gender, bmi: float) -> StageScore:
    """Score age bands plus a gender-conditioned weight adjustment."""
    score = 0.0
    factors: list[str] = []

    if age >= 65:
        score += 0.30
        factors.append("Advanced age (≥65) - Significantly increased risk")
    elif age >= 45:
        score += 0.25
        factors.append("Middle age (45-64) - Increased diabetes risk")
    elif age >= 35:
        score += 0.15
        factors.append("Age 35-44 - Moderate risk increase")

    # Evaluated independently of the age ladder
    if gender is Gender.MALE:
        if bmi > 27:
            score += 0.10
            factors.append("Male with elevated BMI - Higher visceral adiposity risk")
    elif gender is Gender.FEMALE:
        if age > 35 and bmi > 25:
            score += 0.08
            factors.append("Female with age and weight factors - Post-reproductive risk")

    return StageScore(score=_clamp(score), factors=tuple(factors))
