"""
Clinical field domains and input validation.

This module owns the declared domain of every clinical measurement that the
risk scorer consumes, and the error type raised when a value falls outside it.

It provides:
- `FIELD_DOMAINS`: ordered table of (field, label, lower, upper, integer).
- `check_value`: strict single-value check used by the scorer.
- `validate_observation`: collects every problem of a submitted record
  (form-submission path, never raises).
- `parse_numeric_input`: parses raw form text and clamps into range,
  returning the clamped value together with a user-facing message.

Notes
-----
- Field names follow the UCI Heart Disease dataset convention
  (``cp``, ``trestbps``, ``chol``, ...), which is also the wire format.
- Clamping lives here, on the caller side. The scorer itself only rejects.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class FieldDomain:
    """Declared domain of one clinical field.

    Attributes
    ----------
    name:
        Field key as used on the wire and on ``ClinicalObservation``.
    label:
        Human-readable label for messages.
    lower, upper:
        Inclusive bounds.
    integer:
        Whether the field only admits whole numbers.
    """
    name: str
    label: str
    lower: float
    upper: float
    integer: bool = True

    @property
    def bound(self) -> Tuple[float, float]:
        return (self.lower, self.upper)


FIELD_DOMAINS: Tuple[FieldDomain, ...] = (
    FieldDomain("age", "Age", 0, 120),
    FieldDomain("sex", "Sex", 0, 1),
    FieldDomain("cp", "Chest Pain Type", 0, 3),
    FieldDomain("trestbps", "Resting Blood Pressure", 50, 250),
    FieldDomain("chol", "Cholesterol", 100, 600),
    FieldDomain("fbs", "Fasting Blood Sugar", 0, 1),
    FieldDomain("restecg", "Resting ECG", 0, 2),
    FieldDomain("thalach", "Max Heart Rate", 40, 220),
    FieldDomain("exang", "Exercise Induced Angina", 0, 1),
    FieldDomain("oldpeak", "ST Depression", 0, 10, integer=False),
    FieldDomain("slope", "ST Slope", 0, 2),
    FieldDomain("ca", "Major Vessels", 0, 3),
    FieldDomain("thal", "Thalassemia", 0, 3),
)

DOMAINS_BY_NAME: Dict[str, FieldDomain] = {d.name: d for d in FIELD_DOMAINS}
FIELD_NAMES: Tuple[str, ...] = tuple(d.name for d in FIELD_DOMAINS)


def _fmt(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else str(v)


class ValidationError(ValueError):
    """A clinical field is missing or outside its declared domain.

    Attributes
    ----------
    field:
        Name of the offending field.
    bound:
        The violated ``(lower, upper)`` domain.
    value:
        The rejected value (``None`` when missing).
    """

    def __init__(self, field: str, bound: Tuple[float, float], message: str, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.bound = bound
        self.value = value
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "bound": list(self.bound), "message": self.message}


def _domain(field: str) -> FieldDomain:
    try:
        return DOMAINS_BY_NAME[field]
    except KeyError:
        raise KeyError(f"Unknown clinical field '{field}'. Available: {list(FIELD_NAMES)}") from None


def _shown(value: Any) -> str:
    # str() of a huge int is slow and may hit the interpreter's digit limit
    if isinstance(value, numbers.Integral) and int(value).bit_length() > 64:
        return f"{'-' if value < 0 else ''}a {int(value).bit_length()}-bit integer"
    return str(value)


def _range_error(d: FieldDomain, value: Any) -> ValidationError:
    return ValidationError(
        d.name,
        d.bound,
        f"{d.label} must be between {_fmt(d.lower)} and {_fmt(d.upper)} (got {_shown(value)})",
        value,
    )


def check_value(field: str, value: Any) -> float:
    """Validate a single value against the field's domain.

    Returns the value as ``int`` for integer fields and ``float`` otherwise.

    Raises
    ------
    ValidationError
        If the value is missing, non-numeric, NaN, non-integral where an
        integer is required, or outside ``[lower, upper]``.
    """
    d = _domain(field)

    if value is None:
        raise ValidationError(field, d.bound, f"Missing required field: {field}")

    if isinstance(value, bool):
        value = int(value)
    if not isinstance(value, numbers.Real):
        raise ValidationError(field, d.bound, f"{d.label} must be a valid number", value)

    # Arbitrary-size ints are compared exactly; float() would overflow.
    if isinstance(value, numbers.Integral):
        if value < d.lower or value > d.upper:
            raise _range_error(d, value)
        return int(value) if d.integer else float(value)

    try:
        num = float(value)
    except OverflowError:
        raise _range_error(d, value) from None
    if math.isnan(num):
        raise ValidationError(field, d.bound, f"{d.label} must be a valid number", value)
    if d.integer and not num.is_integer():
        raise ValidationError(field, d.bound, f"{d.label} must be a whole number (got {value})", value)
    if num < d.lower or num > d.upper:
        raise _range_error(d, value)

    return int(num) if d.integer else num


def validate_observation(data: Mapping[str, Any]) -> List[ValidationError]:
    """Collect every validation problem of a record, in field order."""
    errors: List[ValidationError] = []
    for name in FIELD_NAMES:
        try:
            check_value(name, data.get(name))
        except ValidationError as e:
            errors.append(e)
    return errors


def parse_numeric_input(raw: Optional[str], field: str, is_float: bool = False) -> Tuple[float, Optional[str]]:
    """Parse raw form text for a field and clamp it into range.

    Returns
    -------
    tuple[float, str | None]
        ``(value, error)``. On empty or unparsable input the value falls back
        to the lower bound; out-of-range input is clamped. ``error`` is
        ``None`` only when the input was valid as typed.
    """
    d = _domain(field)

    if raw is None or str(raw).strip() == "":
        return d.lower, f"{d.label} is required"

    text = str(raw).strip()
    try:
        parsed = float(text) if is_float else float(int(float(text)))
    except (ValueError, OverflowError):
        return d.lower, f"{d.label} must be a valid number"
    if math.isnan(parsed):
        return d.lower, f"{d.label} must be a valid number"

    if parsed < d.lower:
        return d.lower, f"{d.label} must be at least {_fmt(d.lower)}"
    if parsed > d.upper:
        return d.upper, f"{d.label} must be at most {_fmt(d.upper)}"
    return parsed, None
