import math

import pytest

from cardiocare.services.scoring import assess
from cardiocare.services.validation import (
    FIELD_NAMES,
    ValidationError,
    check_value,
    parse_numeric_input,
    validate_observation,
)


def test_field_order():
    assert FIELD_NAMES == (
        "age", "sex", "cp", "trestbps", "chol", "fbs", "restecg",
        "thalach", "exang", "oldpeak", "slope", "ca", "thal",
    )


def test_check_value_accepts_bounds():
    assert check_value("age", 0) == 0
    assert check_value("age", 120) == 120
    assert check_value("oldpeak", 10) == 10.0


def test_integral_float_is_accepted_as_int():
    value = check_value("age", 55.0)
    assert value == 55
    assert isinstance(value, int)


def test_bool_counts_as_flag():
    assert check_value("exang", True) == 1


@pytest.mark.parametrize("field,value", [
    ("age", -1), ("age", 121), ("sex", 2), ("cp", 4), ("trestbps", 49),
    ("chol", 601), ("restecg", 3), ("thalach", 221), ("oldpeak", -0.1),
    ("slope", 3), ("ca", 4), ("thal", 4),
])
def test_out_of_domain(field, value):
    with pytest.raises(ValidationError) as exc:
        check_value(field, value)
    assert exc.value.field == field
    assert exc.value.value == value


def test_message_names_bound():
    with pytest.raises(ValidationError) as exc:
        check_value("age", 150)
    assert str(exc.value) == "Age must be between 0 and 120 (got 150)"
    assert exc.value.to_dict() == {
        "field": "age", "bound": [0, 120], "message": "Age must be between 0 and 120 (got 150)",
    }


@pytest.mark.parametrize("value", [1.5, "3", math.nan])
def test_rejects_non_integral_or_non_numeric(value):
    with pytest.raises(ValidationError):
        check_value("cp", value)


def test_missing_value():
    with pytest.raises(ValidationError, match="Missing required field: chol"):
        check_value("chol", None)


def test_validation_error_is_value_error():
    assert issubclass(ValidationError, ValueError)


def test_unknown_field():
    with pytest.raises(KeyError):
        check_value("bmi", 22)


def test_validate_observation_collects_all(low_risk):
    low_risk.update(age=150, chol=1000)
    del low_risk["ca"]
    errors = validate_observation(low_risk)
    assert [e.field for e in errors] == ["age", "chol", "ca"]


def test_validate_observation_clean(low_risk):
    assert validate_observation(low_risk) == []


@pytest.mark.parametrize("raw,field,is_float,expected", [
    ("", "age", False, (0, "Age is required")),
    (None, "chol", False, (100, "Cholesterol is required")),
    ("abc", "chol", False, (100, "Cholesterol must be a valid number")),
    ("700", "chol", False, (600, "Cholesterol must be at most 600")),
    ("30", "thalach", False, (40, "Max Heart Rate must be at least 40")),
    ("-1", "oldpeak", True, (0, "ST Depression must be at least 0")),
    ("2.5", "oldpeak", True, (2.5, None)),
    ("55.7", "age", False, (55.0, None)),
    (" 130 ", "trestbps", False, (130.0, None)),
])
def test_parse_numeric_input(raw, field, is_float, expected):
    assert parse_numeric_input(raw, field, is_float) == expected


@pytest.mark.parametrize("field", ["age", "chol", "oldpeak"])
def test_huge_int_is_out_of_range_not_overflow(field):
    with pytest.raises(ValidationError) as exc:
        check_value(field, 10 ** 400)
    assert exc.value.field == field
    assert "must be between" in exc.value.message
    assert "1329-bit integer" in exc.value.message


def test_huge_negative_int_is_out_of_range():
    with pytest.raises(ValidationError) as exc:
        check_value("thal", -(10 ** 400))
    assert exc.value.bound == (0, 3)


def test_validate_observation_reports_huge_int(low_risk):
    low_risk["chol"] = 10 ** 400
    errors = validate_observation(low_risk)
    assert [e.field for e in errors] == ["chol"]


def test_assess_rejects_huge_int(low_risk):
    low_risk["age"] = 10 ** 400
    with pytest.raises(ValidationError) as exc:
        assess(low_risk)
    assert exc.value.field == "age"
    assert exc.value.bound == (0, 120)
