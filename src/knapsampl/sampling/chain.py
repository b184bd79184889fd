from __future__ import annotations

"""
Constrained random walk over fixed-cardinality binary vectors.

Each iteration proposes a 0/1 swap of the current state and keeps it only if it
is feasible. Accepted states are recorded in acceptance order. The walk stops at
`num_sampl` accepted states or after `max_iter` proposals, whichever comes first;
running out of budget returns a short table rather than an error.

Design choices (KISS):
- No mixing diagnostics, no thinning, no deduplication (see validation.chain_stats).
- The starting vector is trusted to be feasible unless `check_init=True`.
"""

import numbers
from enum import Enum
from typing import Any

import numpy as np

from ..constraints.constraint_set import ConstraintSet
from ..constraints.feasibility import is_feasible
from ..errors import InfeasibleInitialState, MalformedConstraintSet
from .proposal import propose_swap


class ChainStatus(str, Enum):
    RUNNING = "running"
    DONE_QUOTA = "done_quota"
    DONE_BUDGET_EXHAUSTED = "done_budget_exhausted"


def _positive_int(value: Any, *, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got: {value!r}")
    return int(value)


def _as_state(init: Any) -> np.ndarray:
    x = np.asarray(init)
    if x.ndim != 1:
        raise ValueError(f"init must be a 1-D vector, got shape {x.shape}")
    if not np.isin(x, (0, 1)).all():
        raise ValueError("init must contain only 0/1 values")
    return x.astype(np.int8)


def sample_chain(
    init: Any,
    num_sampl: int,
    max_iter: int | None = None,
    constraints: ConstraintSet | None = None,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    check_init: bool = False,
    return_meta: bool = False,
) -> Any:
    """
    Generate feasible binary vectors by MCMC bit swaps.

    Args:
        init: feasible starting vector (0/1), length num_var.
        num_sampl: number of samples wanted.
        max_iter: proposal budget (default: 2 * num_sampl).
        constraints: combined constraints, or None for the unconstrained walk.
        seed: seed for a fresh numpy Generator (ignored when `rng` is given).
        rng: random source; threaded through every proposal.
        check_init: verify `init` is feasible before walking.
        return_meta: if True, returns (samples, meta) where meta records the
            terminal status, iterations used and acceptance rate.

    Returns:
        int8 array of shape (n_accepted, num_var), 0 <= n_accepted <= num_sampl.
        If return_meta=True, returns (samples, meta).
    """
    num_sampl = _positive_int(num_sampl, name="num_sampl")
    max_iter = 2 * num_sampl if max_iter is None else _positive_int(max_iter, name="max_iter")
    x = _as_state(init)
    num_var = int(x.shape[0])

    if constraints is not None and constraints.num_var != num_var:
        raise MalformedConstraintSet(
            f"constraints have {constraints.num_var} columns but init has {num_var} variables"
        )
    if check_init and not is_feasible(x, constraints):
        raise InfeasibleInitialState("init violates the constraints")

    if rng is None:
        rng = np.random.default_rng(seed)

    # At most one acceptance per iteration.
    out = np.empty((min(num_sampl, max_iter), num_var), dtype=np.int8)
    accepted = 0
    iterations = 0
    status = ChainStatus.RUNNING

    while status is ChainStatus.RUNNING:
        y = propose_swap(x, rng=rng)
        if is_feasible(y, constraints):
            x = y
            out[accepted] = y
            accepted += 1
        iterations += 1

        if accepted == num_sampl:
            status = ChainStatus.DONE_QUOTA
        elif iterations == max_iter:
            status = ChainStatus.DONE_BUDGET_EXHAUSTED

    samples = out[:accepted].copy()
    if not return_meta:
        return samples

    meta: dict[str, Any] = {
        "status": status.value,
        "requested": num_sampl,
        "accepted": accepted,
        "iterations": iterations,
        "max_iter": max_iter,
        "acceptance_rate": accepted / iterations,
        "num_var": num_var,
        "num_constraints": 0 if constraints is None else constraints.num_constraints,
    }
    return samples, meta
