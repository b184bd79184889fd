from __future__ import annotations

"""
Linear constraint model: A · x (==|<=|>=) b over binary x.

Constraints arrive as an ordered list of blocks (e.g. one equality block for the
total cardinality, one "<=" block of group caps, one ">=" block of group floors).
`combine_blocks` row-stacks them into a single immutable ConstraintSet that the
feasibility check and the initial-state solver share read-only.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from ..errors import MalformedConstraintSet


class Direction(str, Enum):
    EQ = "=="
    LE = "<="
    GE = ">="

    @classmethod
    def parse(cls, symbol: Any) -> "Direction":
        if isinstance(symbol, Direction):
            return symbol
        try:
            return cls(str(symbol).strip())
        except ValueError:
            raise MalformedConstraintSet(
                f"unknown constraint direction: {symbol!r} (use one of '==', '<=', '>=')"
            ) from None


def _as_matrix(matrix: Any, *, what: str) -> np.ndarray:
    a = np.asarray(matrix, dtype=float)
    if a.ndim == 1:
        # A single constraint row given as a flat list.
        a = a.reshape(1, -1)
    if a.ndim != 2:
        raise MalformedConstraintSet(f"{what} matrix must be 2-D, got shape {a.shape}")
    if not np.isfinite(a).all():
        raise MalformedConstraintSet(f"{what} matrix has non-finite coefficients")
    return a


def _as_rhs(rhs: Any, *, what: str) -> np.ndarray:
    b = np.atleast_1d(np.asarray(rhs, dtype=float))
    if b.ndim != 1:
        raise MalformedConstraintSet(f"{what} rhs must be 1-D, got shape {b.shape}")
    if not np.isfinite(b).all():
        raise MalformedConstraintSet(f"{what} rhs has non-finite values")
    return b


def _as_directions(directions: Any, *, n_rows: int) -> tuple[Direction, ...]:
    if isinstance(directions, (str, Direction)):
        # One symbol for the whole block.
        return tuple(Direction.parse(directions) for _ in range(n_rows))
    return tuple(Direction.parse(d) for d in directions)


def _check_rows(*, n_matrix: int, n_dir: int, n_rhs: int, what: str) -> None:
    if not (n_matrix == n_dir == n_rhs):
        raise MalformedConstraintSet(
            f"{what}: row count mismatch (matrix={n_matrix}, directions={n_dir}, rhs={n_rhs})"
        )


def _readonly(a: np.ndarray) -> np.ndarray:
    a = np.array(a, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class ConstraintBlock:
    matrix: Any
    directions: Any
    rhs: Any

    def __post_init__(self) -> None:
        a = _as_matrix(self.matrix, what="block")
        b = _as_rhs(self.rhs, what="block")
        dirs = _as_directions(self.directions, n_rows=a.shape[0])
        _check_rows(n_matrix=a.shape[0], n_dir=len(dirs), n_rhs=b.shape[0], what="block")
        object.__setattr__(self, "matrix", _readonly(a))
        object.__setattr__(self, "directions", dirs)
        object.__setattr__(self, "rhs", _readonly(b))

    @property
    def num_var(self) -> int:
        return int(self.matrix.shape[1])

    @classmethod
    def from_mapping(cls, block: Mapping[str, Any]) -> "ConstraintBlock":
        """
        Build a block from a config-style mapping.

        Accepted keys: `matrix`/`dir`/`rhs`, or the long forms
        `constr.mat`/`constr.dir`/`constr.rhs`. `dir` may be a single symbol
        applied to every row.
        """

        def _pick(*keys: str) -> Any:
            for k in keys:
                if k in block:
                    return block[k]
            raise MalformedConstraintSet(f"constraint block missing key: {keys[0]}")

        return cls(
            matrix=_pick("matrix", "constr.mat"),
            directions=_pick("dir", "directions", "constr.dir"),
            rhs=_pick("rhs", "constr.rhs"),
        )


@dataclass(frozen=True, eq=False)
class ConstraintSet:
    """
    Combined constraints, immutable after construction.

    Per-row comparison is resolved here into boolean masks, so evaluation never
    looks up a direction symbol. `atol` is the tolerance policy for floating
    coefficients; the default 0.0 means exact comparison.
    """

    matrix: Any
    directions: Any
    rhs: Any
    atol: float = 0.0
    eq_mask: np.ndarray = field(init=False, repr=False)
    le_mask: np.ndarray = field(init=False, repr=False)
    ge_mask: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        a = _as_matrix(self.matrix, what="constraint")
        b = _as_rhs(self.rhs, what="constraint")
        dirs = _as_directions(self.directions, n_rows=a.shape[0])
        _check_rows(n_matrix=a.shape[0], n_dir=len(dirs), n_rhs=b.shape[0], what="constraint set")
        atol = float(self.atol)
        if not np.isfinite(atol) or atol < 0:
            raise MalformedConstraintSet(f"atol must be a finite non-negative number, got: {self.atol}")

        object.__setattr__(self, "matrix", _readonly(a))
        object.__setattr__(self, "directions", dirs)
        object.__setattr__(self, "rhs", _readonly(b))
        object.__setattr__(self, "atol", atol)
        object.__setattr__(self, "eq_mask", _readonly(np.array([d is Direction.EQ for d in dirs], dtype=bool)))
        object.__setattr__(self, "le_mask", _readonly(np.array([d is Direction.LE for d in dirs], dtype=bool)))
        object.__setattr__(self, "ge_mask", _readonly(np.array([d is Direction.GE for d in dirs], dtype=bool)))

    @property
    def num_var(self) -> int:
        return int(self.matrix.shape[1])

    @property
    def num_constraints(self) -> int:
        return int(self.matrix.shape[0])

    def __len__(self) -> int:
        return self.num_constraints

    def to_dict(self) -> dict[str, Any]:
        return {
            "matrix": self.matrix.tolist(),
            "dir": [d.value for d in self.directions],
            "rhs": self.rhs.tolist(),
            "atol": self.atol,
        }


def combine_blocks(
    blocks: Iterable[ConstraintBlock | Mapping[str, Any]] | None,
    *,
    atol: float = 0.0,
) -> ConstraintSet | None:
    """
    Row-stack constraint blocks into one ConstraintSet, preserving block order.

    Returns None when there are no blocks (the unconstrained case).
    """
    if blocks is None:
        return None

    parsed: list[ConstraintBlock] = []
    for i, blk in enumerate(blocks):
        if isinstance(blk, ConstraintBlock):
            parsed.append(blk)
        elif isinstance(blk, Mapping):
            parsed.append(ConstraintBlock.from_mapping(blk))
        else:
            raise MalformedConstraintSet(f"constraint block {i} has unsupported type: {type(blk).__name__}")

    if not parsed:
        return None

    widths = sorted({b.num_var for b in parsed})
    if len(widths) != 1:
        raise MalformedConstraintSet(f"constraint blocks disagree on number of variables: {widths}")

    directions: list[Direction] = []
    for b in parsed:
        directions.extend(b.directions)

    return ConstraintSet(
        matrix=np.vstack([b.matrix for b in parsed]),
        directions=tuple(directions),
        rhs=np.concatenate([b.rhs for b in parsed]),
        atol=atol,
    )
