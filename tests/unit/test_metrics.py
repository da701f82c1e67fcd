import math

import numpy as np
import pytest

from cardiocare.services.metrics import average_precision, compute_metrics_from_classes, evaluate, roc_auc
from cardiocare.services.validation import ValidationError


def test_perfect_classes():
    y = np.array([1, 0, 1, 0])
    res = compute_metrics_from_classes(y, y)
    assert res["accuracy"] == pytest.approx(1.0)
    assert res["precision"] == pytest.approx(1.0)
    assert res["recall"] == pytest.approx(1.0)
    assert res["mcc"] == pytest.approx(1.0)


def test_inverted_classes():
    y = np.array([1, 0, 1, 0])
    res = compute_metrics_from_classes(1 - y, y)
    assert res["accuracy"] == pytest.approx(0.0)
    assert res["mcc"] == pytest.approx(-1.0)


def test_auc_perfect_ranking():
    y = np.array([1, 1, 0, 0])
    s = np.array([0.9, 0.8, 0.2, 0.1])
    assert roc_auc(y, s) == pytest.approx(1.0)
    assert average_precision(y, s) == pytest.approx(1.0)


def test_auc_reversed_ranking():
    y = np.array([0, 0, 1, 1])
    s = np.array([0.9, 0.8, 0.2, 0.1])
    assert roc_auc(y, s) == pytest.approx(0.0)


def test_auc_single_class_is_nan():
    assert math.isnan(roc_auc(np.array([1, 1]), np.array([0.3, 0.4])))
    assert math.isnan(average_precision(np.array([0, 0]), np.array([0.3, 0.4])))


def test_evaluate(low_risk, high_risk):
    res = evaluate([low_risk, high_risk], [0, 1])
    assert res["n"] == 2
    assert res["metrics"]["accuracy"] == pytest.approx(1.0)
    assert res["auc_roc"] == pytest.approx(1.0)
    assert res["level_counts"] == {"high": 1, "low": 1}


def test_evaluate_rejects_bad_input(low_risk):
    with pytest.raises(ValueError):
        evaluate([], [])
    with pytest.raises(ValueError):
        evaluate([low_risk], [0, 1])
    low_risk["age"] = 150
    with pytest.raises(ValidationError):
        evaluate([low_risk], [0])


def test_undefined_ratios_are_zero():
    res = compute_metrics_from_classes(np.array([0, 0]), np.array([1, 0]))
    assert res["precision"] == 0.0
    assert res["mcc"] == 0.0
    assert res["accuracy"] == pytest.approx(0.5)


def test_tied_scores():
    y = np.array([1, 0, 1, 0])
    s = np.array([0.5, 0.5, 0.9, 0.1])
    # pos/neg pairs: (0.9 > both) + (0.5 > 0.1) + (0.5 == 0.5 counted half)
    assert roc_auc(y, s) == pytest.approx(3.5 / 4)
    # steps: 0.9 -> P=1, R=.5 ; 0.5 -> P=2/3, R=1
    assert average_precision(y, s) == pytest.approx(0.5 * 1 + 0.5 * (2 / 3))
