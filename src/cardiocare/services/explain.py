# src/cardiocare/services/explain.py
"""
Explainability utilities for the cardiovascular risk scorer.

Two primitives, both built on top of `scoring.assess` so they can never
disagree with the score a patient actually receives:

1) Factor table
   - One row per observation, one column per clinical field holding the
     points that field contributed, plus the raw total and final score.

2) Partial Dependence (PDP)
   - Sweeps a single field across a grid while holding all other fields at
     their observed values, averaging the resulting score at each grid point.

Notes
-----
- Inputs are plain mappings (e.g. request rows); they are validated by the
  scorer, so an out-of-domain value raises `ValidationError`.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .scoring import ClinicalObservation, assess, factor_points
from .validation import DOMAINS_BY_NAME, FIELD_NAMES, check_value


def _frame(rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    if rows is None or len(rows) == 0:
        raise ValueError("Empty 'data'.")
    return pd.DataFrame([{name: r.get(name) for name in FIELD_NAMES} for r in rows])


def factor_table(rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Per-field point contributions for every row.

    Returns
    -------
    pd.DataFrame
        Columns: the thirteen field names, ``raw_total`` and ``score``.
    """
    records = []
    for row in rows:
        obs = ClinicalObservation.from_mapping(row)
        pts = factor_points(obs)
        pts["raw_total"] = float(sum(pts.values()))
        pts["score"] = assess(obs).score
        records.append(pts)
    if not records:
        raise ValueError("Empty 'data'.")
    return pd.DataFrame.from_records(records, columns=[*FIELD_NAMES, "raw_total", "score"])


def default_grid(feature: str, grid_size: int = 20) -> List[float]:
    """Evenly spaced values over the feature's declared domain.

    Integer fields are snapped to unique whole numbers.
    """
    d = DOMAINS_BY_NAME[feature]
    grid = np.linspace(d.lower, d.upper, int(max(grid_size, 2)))
    if d.integer:
        grid = np.unique(np.round(grid).astype(int))
    return [float(v) for v in grid]


def partial_dependence(
    rows: Sequence[Mapping[str, Any]],
    feature: str,
    grid: Optional[List[float]] = None,
    grid_size: int = 20,
) -> Dict[str, object]:
    """
    Compute 1D Partial Dependence of the score on a given field.

    Args
    ----
    rows:
        Background observations used to average out the other fields.
    feature:
        Field name to sweep.
    grid:
        Optional explicit grid values. Every value must lie in the field's
        domain. If omitted, `default_grid` is used.
    grid_size:
        Number of grid points when `grid` is not provided (min 2).

    Returns
    -------
    dict
        Keys ``feature``, ``grid`` (list[float]) and ``pdp`` (mean score at
        each grid value).

    Raises
    ------
    ValueError
        If `rows` is empty or `feature` is not a clinical field.
    ValidationError
        If a grid value or a background row is outside its domain.
    """
    X = _frame(rows)
    if feature not in DOMAINS_BY_NAME:
        raise ValueError(f"Feature '{feature}' not found. Available: {list(FIELD_NAMES)}")

    if grid is None or len(grid) == 0:
        grid = default_grid(feature, grid_size)
    for g in grid:
        check_value(feature, g)

    pdp_vals: List[float] = []
    X_tmp = X.copy()
    for g in grid:
        X_tmp[feature] = g
        scores = [assess(r).score for r in X_tmp.to_dict(orient="records")]
        pdp_vals.append(float(np.mean(scores)))

    return {
        "feature": feature,
        "grid": [float(v) for v in grid],
        "pdp": pdp_vals,
    }
