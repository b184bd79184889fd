from __future__ import annotations

"""
Feasibility of a binary vector against a ConstraintSet.
"""

from typing import Any

import numpy as np

from .constraint_set import ConstraintSet


def _row_pass(y: Any, constraints: ConstraintSet) -> np.ndarray:
    ay = constraints.matrix @ np.asarray(y, dtype=float)
    b = constraints.rhs
    tol = constraints.atol
    ok = np.empty(b.shape, dtype=bool)
    ok[constraints.eq_mask] = np.abs(ay - b)[constraints.eq_mask] <= tol
    ok[constraints.le_mask] = (ay <= b + tol)[constraints.le_mask]
    ok[constraints.ge_mask] = (ay >= b - tol)[constraints.ge_mask]
    return ok


def is_feasible(y: Any, constraints: ConstraintSet | None) -> bool:
    """True iff every row of `constraints` holds for `y`. No constraints -> True."""
    if constraints is None or constraints.num_constraints == 0:
        return True
    return bool(_row_pass(y, constraints).all())


def violated_rows(y: Any, constraints: ConstraintSet | None) -> np.ndarray:
    if constraints is None or constraints.num_constraints == 0:
        return np.empty((0,), dtype=int)
    return np.flatnonzero(~_row_pass(y, constraints))


def row_slack(y: Any, constraints: ConstraintSet) -> np.ndarray:
    """
    Signed slack per constraint row.

    "<=" rows: b - A·y, ">=" rows: A·y - b, "==" rows: -|A·y - b|.
    A row is satisfied (exactly) when its slack is >= 0.
    """
    ay = constraints.matrix @ np.asarray(y, dtype=float)
    b = constraints.rhs
    slack = np.empty(b.shape, dtype=float)
    slack[constraints.eq_mask] = -np.abs(ay - b)[constraints.eq_mask]
    slack[constraints.le_mask] = (b - ay)[constraints.le_mask]
    slack[constraints.ge_mask] = (ay - b)[constraints.ge_mask]
    return slack
