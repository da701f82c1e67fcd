"""
Cardiovascular risk scorer.

A deterministic weighted-sum heuristic over thirteen clinical fields. Every
caller (quick preview, prediction endpoint, saved reports) goes through
`assess`, so there is exactly one weight table and one threshold table.

Weights
-------
    age          >=65:15  >=55:12  >=45:8  >=35:4
    sex          male:5
    cp           x4
    trestbps     >=180:15 >=160:12 >=140:8 >=120:4
    chol         >=300:15 >=260:12 >=240:8 >=200:4
    fbs          5
    restecg      x3
    thalach      <100:10  <120:7   <140:4  <160:2
    exang        10
    oldpeak      min(x*2.5, 10)
    slope        x3
    ca           x4
    thal         x3

The raw sum (max 118) is clamped to 100 and rounded half-up.

Levels
------
    score >= 60 -> high, score >= 35 -> medium, otherwise low.
"""

import logging
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Union

from .validation import FIELD_NAMES, check_value

logger = logging.getLogger(__name__)

MAX_SCORE = 100
HIGH_THRESHOLD = 60
MEDIUM_THRESHOLD = 35


class RiskLevel(str, Enum):
    """Categorical cardiovascular risk bucket."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


LABELS: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: "High Probability of Heart Disease",
    RiskLevel.MEDIUM: "Moderate Risk of Heart Disease",
    RiskLevel.LOW: "Low Probability of Heart Disease",
}


@dataclass(frozen=True)
class ClinicalObservation:
    """The thirteen measurements required for one assessment.

    Construct through `from_mapping` to get domain validation; the bare
    constructor trusts its arguments.
    """
    age: int
    sex: int
    cp: int
    trestbps: int
    chol: int
    fbs: int
    restecg: int
    thalach: int
    exang: int
    oldpeak: float
    slope: int
    ca: int
    thal: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClinicalObservation":
        """Validate a record field by field and build an observation.

        Raises
        ------
        ValidationError
            On the first missing or out-of-domain field, in declared order.
        """
        return cls(**{name: check_value(name, data.get(name)) for name in FIELD_NAMES})

    def validated(self) -> "ClinicalObservation":
        return ClinicalObservation.from_mapping(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class RiskAssessment:
    """Result of one scoring call."""
    score: int
    level: RiskLevel
    label: str

    @property
    def risk_percentage(self) -> float:
        return self.score / MAX_SCORE

    @property
    def prediction_class(self) -> int:
        return 0 if self.level is RiskLevel.LOW else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level.value,
            "label": self.label,
            "risk_percentage": self.risk_percentage,
            "prediction_class": self.prediction_class,
        }


def _banded(value: float, bands, ascending: bool = True) -> int:
    """Return the points of the first band the value reaches."""
    for cut, pts in bands:
        if (value >= cut) if ascending else (value < cut):
            return pts
    return 0


def factor_points(obs: ClinicalObservation) -> Dict[str, float]:
    """Per-field contributions; their sum is the raw (unclamped) score."""
    return {
        "age": _banded(obs.age, ((65, 15), (55, 12), (45, 8), (35, 4))),
        "sex": 5 if obs.sex == 1 else 0,
        "cp": obs.cp * 4,
        "trestbps": _banded(obs.trestbps, ((180, 15), (160, 12), (140, 8), (120, 4))),
        "chol": _banded(obs.chol, ((300, 15), (260, 12), (240, 8), (200, 4))),
        "fbs": 5 if obs.fbs == 1 else 0,
        "restecg": obs.restecg * 3,
        "thalach": _banded(obs.thalach, ((100, 10), (120, 7), (140, 4), (160, 2)), ascending=False),
        "exang": 10 if obs.exang == 1 else 0,
        "oldpeak": min(obs.oldpeak * 2.5, 10.0),
        "slope": obs.slope * 3,
        "ca": obs.ca * 4,
        "thal": obs.thal * 3,
    }


def level_for_score(score: float) -> RiskLevel:
    if score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def label_for_level(level: Union[RiskLevel, str]) -> str:
    return LABELS[RiskLevel(level)]


def assess(observation: Union[ClinicalObservation, Mapping[str, Any]]) -> RiskAssessment:
    """Score one observation.

    Args
    ----
    observation:
        A `ClinicalObservation` or a plain mapping with the thirteen fields.
        Either way every field is re-checked against its domain.

    Returns
    -------
    RiskAssessment
        Integer score in [0, 100], its level and label.

    Raises
    ------
    ValidationError
        If any field is missing or outside its declared domain.
    """
    if isinstance(observation, ClinicalObservation):
        obs = observation.validated()
    else:
        obs = ClinicalObservation.from_mapping(observation)

    raw = sum(factor_points(obs).values())
    score = int(math.floor(min(raw, MAX_SCORE) + 0.5))
    level = level_for_score(score)

    logger.debug("Risk calculation: score=%d, level=%s", score, level.value)
    return RiskAssessment(score=score, level=level, label=LABELS[level])
