"""MCP tool for diabetes risk assessment (remote waterfall + local fallback)."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

from medgluco.domains.diabetes.domain_logic.metrics import (
    FORM_RANGES,
    ValidationError,
    validate_metrics,
)
from medgluco.domains.diabetes.domain_logic.risk_models import DiagnosisResult

if TYPE_CHECKING:
    from medgluco.domains.diabetes.orchestrator import PredictionOrchestrator

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "This is a screening estimate, not a medical diagnosis. "
    "Consult a qualified healthcare provider for proper diagnosis."
)

_HIGH_SEVERITY_CONFIDENCE = 0.7


def _severity(result: DiagnosisResult) -> str:
    """Map a diagnosis to the result card's severity band."""
    if not result.is_diabetic:
        return "low"
    return "high" if result.confidence > _HIGH_SEVERITY_CONFIDENCE else "elevated"


def summarize_diagnosis(result: DiagnosisResult) -> dict[str, Any]:
    """Build the plain-language summary shown alongside a diagnosis."""
    if result.is_diabetic:
        headline = "Diabetes Risk Detected"
        if result.diabetes_type.label:
            headline += f" - {result.diabetes_type.label}"
        message = (
            "Your health metrics indicate potential diabetes. "
            "Please consult a healthcare provider for proper diagnosis."
        )
    else:
        headline = "Low Diabetes Risk"
        message = "Based on your health metrics, you show low risk indicators for diabetes."

    return {
        "risk_level": "High" if result.is_diabetic else "Low",
        "severity": _severity(result),
        "confidence_percent": round(result.confidence * 100, 1),
        "headline": headline,
        "message": message,
        "disclaimer": DISCLAIMER,
    }


def register_diabetes_risk_tools(mcp: FastMCP, orchestrator: PredictionOrchestrator) -> None:
    """Register the diabetes risk assessment tool on the MCP server."""

    @mcp.tool
    async def diabetes_risk_assessment(
        age: float | str,
        gender: str,
        glucose: float | str,
        blood_pressure: float | str,
        bmi: float | str,
        insulin: float | str,
    ) -> dict:
        """Estimate diabetes risk from six health metrics.

        Args:
            age: Age in years (1-120).
            gender: male, female or other.
            glucose: Fasting glucose in mg/dL (50-300).
            blood_pressure: Diastolic blood pressure in mmHg (40-200).
            bmi: Body mass index (10-60).
            insulin: Insulin in µU/mL (0-100).
        """
        start_time = time.monotonic()

        try:
            metrics = validate_metrics(
                {
                    "age": age,
                    "gender": gender,
                    "glucose": glucose,
                    "bloodPressure": blood_pressure,
                    "bmi": bmi,
                    "insulin": insulin,
                },
                FORM_RANGES,
            )
        except ValidationError as exc:
            logger.info("Assessment blocked: invalid %s", exc.field)
            raise ValueError(str(exc)) from exc

        result, source = await orchestrator.predict_with_source(metrics)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Assessment complete via %s in %.0f ms (diabetic=%s)",
            source, elapsed_ms, result.is_diabetic,
        )

        return {
            **result.to_dict(),
            "summary": summarize_diagnosis(result),
            "source": source,
        }
