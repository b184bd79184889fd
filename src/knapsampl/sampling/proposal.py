from __future__ import annotations

"""
Cardinality-preserving proposal: turn one 0-bit on and one 1-bit off.
"""

from typing import Any

import numpy as np

from ..errors import EmptyCandidateSet


def _pick(idx: np.ndarray, rng: np.random.Generator) -> int:
    # No draw for a single candidate, so draw counts stay reproducible.
    if idx.shape[0] == 1:
        return int(idx[0])
    return int(idx[rng.integers(idx.shape[0])])


def propose_swap(x: Any, *, rng: np.random.Generator) -> np.ndarray:
    """
    Return a copy of `x` with one uniformly chosen 0-bit set to 1 and one
    uniformly chosen 1-bit set to 0. The 0-side is drawn before the 1-side.

    Raises EmptyCandidateSet when `x` is all zeros or all ones.
    """
    x = np.asarray(x)
    if x.ndim != 1:
        raise ValueError(f"state must be a 1-D vector, got shape {x.shape}")

    zeros = np.flatnonzero(x == 0)
    ones = np.flatnonzero(x == 1)
    if zeros.shape[0] + ones.shape[0] != x.shape[0]:
        raise ValueError("state must contain only 0/1 values")
    if zeros.shape[0] == 0:
        raise EmptyCandidateSet("state has no 0-bit to switch on")
    if ones.shape[0] == 0:
        raise EmptyCandidateSet("state has no 1-bit to switch off")

    i0 = _pick(zeros, rng)
    i1 = _pick(ones, rng)

    y = x.copy()
    y[i0] = 1
    y[i1] = 0
    return y
