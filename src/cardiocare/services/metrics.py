"""
Audit metrics for the risk heuristic against labeled observations.

`evaluate` scores every observation with `assess` and compares the result
with known outcomes:
- accuracy/precision/recall/MCC of ``prediction_class`` (the fixed level
  table decides; nothing here tunes a threshold),
- ROC-AUC and average precision of ``risk_percentage``.

Targets are binary, encoded as {0, 1}.
"""

import math
from typing import Any, Dict, Mapping, Sequence

import numpy as np
import pandas as pd

from .scoring import assess


def compute_metrics_from_classes(yhat: np.ndarray, y: np.ndarray) -> Dict[str, float]:
    """Accuracy, precision, recall and MCC of hard 0/1 predictions.

    Undefined ratios (e.g. precision with no predicted positives) are 0.
    """
    y = np.asarray(y).ravel().astype(int)
    yhat = np.asarray(yhat).ravel().astype(int)
    tn, fp, fn, tp = np.bincount(2 * y + yhat, minlength=4).tolist()

    def ratio(num: float, den: float) -> float:
        return float(num / den) if den else 0.0

    return {
        "accuracy": ratio(tp + tn, y.size),
        "precision": ratio(tp, tp + fp),
        "recall": ratio(tp, tp + fn),
        "mcc": ratio(tp * tn - fp * fn, math.sqrt((tp + fp) * (tp + fn) * (tn + fp) * (tn + fn))),
    }


def roc_auc(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """ROC-AUC as the rank statistic P(score_pos > score_neg), ties counted half.

    Returns NaN when only one class is present.
    """
    y = np.asarray(y_true).ravel().astype(int)
    n_pos = int(y.sum())
    n_neg = y.size - n_pos
    if n_pos == 0 or n_neg == 0:
        return float("nan")

    ranks = pd.Series(np.asarray(y_score, dtype=float).ravel()).rank(method="average").to_numpy()
    return float((ranks[y == 1].sum() - n_pos * (n_pos + 1) / 2) / (n_pos * n_neg))


def average_precision(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Precision averaged over recall steps, one step per distinct score.

    Returns NaN when there are no positives.
    """
    frame = pd.DataFrame({
        "y": np.asarray(y_true).ravel().astype(int),
        "score": np.asarray(y_score, dtype=float).ravel(),
    })
    n_pos = int(frame["y"].sum())
    if n_pos == 0:
        return float("nan")

    steps = frame.groupby("score")["y"].agg(["sum", "count"]).sort_index(ascending=False)
    tp = steps["sum"].cumsum()
    precision = tp / steps["count"].cumsum()
    recall = tp / n_pos
    return float((recall.diff().fillna(recall.iloc[0]) * precision).sum())


def evaluate(observations: Sequence[Mapping[str, Any]], targets: Sequence[int]) -> Dict[str, Any]:
    """Score labeled observations and report classification quality.

    Raises
    ------
    ValueError
        If the inputs are empty or of different lengths.
    ValidationError
        If any observation is outside its declared domain.
    """
    if len(observations) == 0:
        raise ValueError("Empty payload.")
    if len(observations) != len(targets):
        raise ValueError("observations and targets must have the same length.")

    results = [assess(o) for o in observations]
    y = np.asarray(targets, dtype=int)
    yhat = np.array([r.prediction_class for r in results], dtype=int)
    proba = np.array([r.risk_percentage for r in results], dtype=float)

    return {
        "n": int(y.size),
        "metrics": compute_metrics_from_classes(yhat, y),
        "auc_roc": roc_auc(y, proba),
        "average_precision": average_precision(y, proba),
        "level_counts": {
            str(k): int(v)
            for k, v in pd.Series([r.level.value for r in results]).value_counts().sort_index().items()
        },
    }
