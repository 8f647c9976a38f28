"""Health metrics record and its validator.

Raw input arrives either from the assessment form (strings) or from a JSON
request body (numbers or numeric-looking strings). ``validate_metrics``
turns it into an immutable ``HealthMetrics`` or raises ``ValidationError``
naming the first offending field. Fields are checked in a fixed order and
validation stops at the first failure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


# Wire names, in validation order.
FIELD_ORDER = ("age", "gender", "glucose", "bloodPressure", "bmi", "insulin")

# Inclusive domains enforced at the remote predictor boundary.
REMOTE_RANGES: dict[str, tuple[float, float]] = {
    "age": (1, 120),
    "glucose": (50, 400),
    "bloodPressure": (40, 200),
    "bmi": (10, 60),
    "insulin": (0, 100),
}

# The assessment form is stricter on glucose only.
FORM_RANGES: dict[str, tuple[float, float]] = {**REMOTE_RANGES, "glucose": (50, 300)}

_RANGE_LABELS = {
    "age": "age",
    "glucose": "glucose",
    "bloodPressure": "blood pressure",
    "bmi": "BMI",
    "insulin": "insulin",
}


class ValidationError(ValueError):
    """A health metric is missing, non-numeric or out of its domain."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class HealthMetrics:
    """Validated patient metrics for one assessment."""

    age: float
    gender: Gender
    glucose: float          # mg/dL
    blood_pressure: float   # diastolic mmHg
    bmi: float
    insulin: float          # µU/mL

    def as_request_body(self) -> dict[str, Any]:
        """Serialize to the remote predictor's JSON request body."""
        return {
            "age": self.age,
            "gender": self.gender.value,
            "glucose": self.glucose,
            "bloodPressure": self.blood_pressure,
            "bmi": self.bmi,
            "insulin": self.insulin,
        }


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(name, f"Health metric '{name}' must be numeric")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise ValidationError(name, f"Health metric '{name}' must be numeric") from None
    if not math.isfinite(number):
        raise ValidationError(name, f"Health metric '{name}' must be a finite number")
    return number


def _parse_gender(value: Any) -> Gender:
    try:
        return Gender(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            "gender", "Invalid gender: must be one of male, female, other"
        ) from None


def validate_metrics(
    raw: Mapping[str, Any],
    ranges: Mapping[str, tuple[float, float]] = REMOTE_RANGES,
) -> HealthMetrics:
    """Parse and range-check raw metrics.

    Args:
        raw: Mapping keyed by wire names (``bloodPressure`` in camelCase).
        ranges: Inclusive (low, high) bounds per numeric field.

    Returns:
        A validated ``HealthMetrics``.

    Raises:
        ValidationError: for the first missing, non-numeric or out-of-range field.
    """
    parsed: dict[str, Any] = {}
    for name in FIELD_ORDER:
        value = raw.get(name)
        if _is_missing(value):
            raise ValidationError(name, f"Missing required health metric: {name}")

        if name == "gender":
            parsed[name] = _parse_gender(value)
            continue

        number = _parse_number(name, value)
        low, high = ranges[name]
        if not low <= number <= high:
            raise ValidationError(
                name, f"Invalid {_RANGE_LABELS[name]} range ({low:g}-{high:g})"
            )
        parsed[name] = number

    return HealthMetrics(
        age=parsed["age"],
        gender=parsed["gender"],
        glucose=parsed["glucose"],
        blood_pressure=parsed["bloodPressure"],
        bmi=parsed["bmi"],
        insulin=parsed["insulin"],
    )
