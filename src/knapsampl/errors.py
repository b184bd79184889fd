from __future__ import annotations

"""
Exceptions raised by the sampler.

Rejected proposals are not errors; only structural problems end a call.
"""


class KnapsamplError(ValueError):
    pass


class EmptyCandidateSet(KnapsamplError):
    """The current state has no 0-bit or no 1-bit, so no swap exists."""


class MalformedConstraintSet(KnapsamplError):
    """Matrix / direction / rhs shapes disagree, or a direction symbol is unknown."""


class InfeasibleInitialState(KnapsamplError):
    """The starting vector violates the constraints (only checked on request)."""


class InfeasibleProblem(KnapsamplError):
    """The solver found no binary vector satisfying the constraints."""
