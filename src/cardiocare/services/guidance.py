"""Diet plan and clinical recommendation text keyed by risk level."""

from typing import Dict, List, Union

from .scoring import RiskAssessment, RiskLevel

DIET_PLANS: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: (
        "DASH Diet - Low Sodium: Focus on fruits, vegetables, whole grains. "
        "Limit sodium to 1,500mg daily. Avoid processed foods, red meat, and sugary beverages. "
        "Include omega-3 rich fish 2-3 times per week."
    ),
    RiskLevel.MEDIUM: (
        "Mediterranean Diet Modified: Emphasize whole grains, legumes, and healthy fats. "
        "Moderate sodium (2,000mg daily). Include regular physical activity. "
        "Limit alcohol and processed foods."
    ),
    RiskLevel.LOW: (
        "Balanced Maintenance Diet: Continue heart-healthy eating habits. "
        "Maintain regular exercise. Annual checkups recommended. "
        "Focus on variety of fruits, vegetables, lean proteins."
    ),
}

BASELINE_RECOMMENDATIONS = (
    "Schedule follow-up in 6 months",
    "Continue monitoring blood pressure",
    "Maintain healthy weight",
)

# Prepended to the baseline list.
LEVEL_RECOMMENDATIONS: Dict[RiskLevel, tuple] = {
    RiskLevel.HIGH: (
        "Urgent: Schedule cardiology consultation",
        "Start cardiac rehabilitation program",
        "Daily blood pressure monitoring required",
        "Consider stress testing",
    ),
    RiskLevel.MEDIUM: (
        "Lifestyle modifications recommended",
        "Consider starting statin therapy",
        "Increase physical activity to 150min/week",
    ),
    RiskLevel.LOW: (),
}


def diet_plan(level: Union[RiskLevel, str]) -> str:
    return DIET_PLANS[RiskLevel(level)]


def recommendations(level: Union[RiskLevel, str]) -> List[str]:
    """Ordered recommendations: level-specific items first, then the baseline."""
    return [*LEVEL_RECOMMENDATIONS[RiskLevel(level)], *BASELINE_RECOMMENDATIONS]


def build_plan(assessment: RiskAssessment) -> Dict[str, object]:
    return {
        "diet_plan": diet_plan(assessment.level),
        "recommendations": recommendations(assessment.level),
    }
