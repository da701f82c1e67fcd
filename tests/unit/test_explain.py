import pytest

from cardiocare.services.explain import default_grid, factor_table, partial_dependence
from cardiocare.services.validation import FIELD_NAMES, ValidationError


def test_factor_table(low_risk, high_risk):
    df = factor_table([low_risk, high_risk])
    assert list(df.columns) == [*FIELD_NAMES, "raw_total", "score"]
    assert df.loc[0, "score"] == 0
    assert df.loc[1, "raw_total"] == pytest.approx(127.0)
    assert df.loc[1, "score"] == 100
    assert df.loc[1, "ca"] == 12


def test_factor_table_empty():
    with pytest.raises(ValueError):
        factor_table([])


def test_default_grid():
    assert default_grid("cp", 20) == [0.0, 1.0, 2.0, 3.0]
    assert default_grid("oldpeak", 3) == [0.0, 5.0, 10.0]
    assert default_grid("age", 2) == [0.0, 120.0]


def test_partial_dependence_age(low_risk):
    res = partial_dependence([low_risk], "age", grid=[30, 40, 50, 60, 70])
    assert res["feature"] == "age"
    assert res["grid"] == [30.0, 40.0, 50.0, 60.0, 70.0]
    assert res["pdp"] == [0.0, 4.0, 8.0, 12.0, 15.0]


def test_partial_dependence_averages_rows(low_risk, high_risk):
    res = partial_dependence([low_risk, high_risk], "exang", grid=[0, 1])
    # low row: 0 -> 10, high row stays clamped at 100
    assert res["pdp"] == [50.0, 55.0]


def test_partial_dependence_default_grid(low_risk):
    res = partial_dependence([low_risk], "ca")
    assert res["grid"] == [0.0, 1.0, 2.0, 3.0]
    assert res["pdp"] == [0.0, 4.0, 8.0, 12.0]


def test_partial_dependence_errors(low_risk):
    with pytest.raises(ValueError):
        partial_dependence([low_risk], "bmi")
    with pytest.raises(ValueError):
        partial_dependence([], "age")
    with pytest.raises(ValidationError):
        partial_dependence([low_risk], "age", grid=[150])
