from __future__ import annotations

"""
Initial feasible state via a binary MILP.

Solves  max obj · x  s.t.  A · x (==|<=|>=) b,  x ∈ {0, 1}^num_var  with
scipy's HiGHS-backed `milp`. The objective only decides which feasible vertex
the chain starts from; by default it is a vector of uniform random weights.
"""

from typing import Any

import numpy as np

from ..constraints.constraint_set import ConstraintSet
from ..errors import InfeasibleProblem, MalformedConstraintSet


def _require_scipy_optimize() -> Any:
    try:
        from scipy import optimize  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("init_state requires scipy>=1.9 (pip install scipy).") from e
    return optimize


def row_bounds(constraints: ConstraintSet) -> tuple[np.ndarray, np.ndarray]:
    """Lower/upper bounds on A · x per row, in LinearConstraint form."""
    lb = np.full(constraints.rhs.shape, -np.inf)
    ub = np.full(constraints.rhs.shape, np.inf)
    b = constraints.rhs
    lb[constraints.eq_mask] = b[constraints.eq_mask]
    ub[constraints.eq_mask] = b[constraints.eq_mask]
    ub[constraints.le_mask] = b[constraints.le_mask]
    lb[constraints.ge_mask] = b[constraints.ge_mask]
    return lb, ub


def init_state(
    num_var: int,
    obj_vec: Any | None = None,
    constraints: ConstraintSet | None = None,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    time_limit: float | None = None,
) -> np.ndarray:
    """
    Return one binary vector satisfying `constraints`.

    Args:
        num_var: number of binary variables.
        obj_vec: objective weights to maximize (default: uniform(0, 1) per variable).
        constraints: combined constraints, or None.
        seed: seed for the default objective (ignored when `rng` is given).
        rng: random source for the default objective.
        time_limit: optional solver time limit in seconds.

    Raises:
        InfeasibleProblem: the solver did not return a feasible solution.
    """
    optimize = _require_scipy_optimize()

    num_var = int(num_var)
    if num_var <= 0:
        raise ValueError(f"num_var must be positive, got: {num_var}")
    if constraints is not None and constraints.num_var != num_var:
        raise MalformedConstraintSet(
            f"constraints have {constraints.num_var} columns but num_var={num_var}"
        )

    if obj_vec is None:
        if rng is None:
            rng = np.random.default_rng(seed)
        obj = rng.uniform(size=num_var)
    else:
        obj = np.asarray(obj_vec, dtype=float).reshape(-1)
        if obj.shape[0] != num_var:
            raise ValueError(f"obj_vec has length {obj.shape[0]}, expected {num_var}")

    linear: list[Any] = []
    if constraints is not None and constraints.num_constraints > 0:
        lb, ub = row_bounds(constraints)
        linear.append(optimize.LinearConstraint(constraints.matrix, lb, ub))

    options: dict[str, Any] = {}
    if time_limit is not None:
        options["time_limit"] = float(time_limit)

    # milp minimizes.
    res = optimize.milp(
        c=-obj,
        constraints=linear or None,
        integrality=np.ones(num_var),
        bounds=optimize.Bounds(0, 1),
        options=options,
    )
    if res.x is None or res.status not in (0, 1):
        raise InfeasibleProblem(f"no binary feasible solution: {res.message}")

    return np.rint(res.x).astype(np.int8)
