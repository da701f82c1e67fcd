"""CardioCare: deterministic cardiovascular risk scoring service."""

from .services.scoring import ClinicalObservation, RiskAssessment, RiskLevel, assess
from .services.validation import ValidationError

__all__ = ["ClinicalObservation", "RiskAssessment", "RiskLevel", "ValidationError", "assess"]
