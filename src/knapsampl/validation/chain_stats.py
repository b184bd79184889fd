from __future__ import annotations

"""
Post-hoc validation of a sample table.

Acceptance checks (v0):
- every sample is feasible
- cardinality equals the starting vector's
- consecutive samples differ in exactly two positions
- shortfall against the requested quota
Plus light diversity summaries (unique rows, per-variable inclusion frequency).
"""

from typing import Any

import numpy as np

from ..constraints.constraint_set import ConstraintSet
from ..constraints.feasibility import row_slack, violated_rows


def compute_chain_metrics(
    *,
    samples: Any,
    init: Any | None = None,
    constraints: ConstraintSet | None = None,
    requested: int | None = None,
) -> dict[str, Any]:
    """
    Summarize a chain's output.

    Args:
        samples: 2-D 0/1 array, one row per accepted sample (acceptance order).
        init: starting vector; enables cardinality and first-step checks.
        constraints: constraints to re-check every row against.
        requested: sample quota the chain was run with.

    Returns:
        dict ready to be dumped as JSON.
    """
    s = np.asarray(samples)
    if s.ndim != 2:
        raise ValueError(f"samples must be 2-D, got shape {s.shape}")
    n, num_var = int(s.shape[0]), int(s.shape[1])

    out: dict[str, Any] = {"n_samples": n, "num_var": num_var}

    if requested is not None:
        out["requested"] = int(requested)
        out["shortfall"] = max(int(requested) - n, 0)

    if n == 0:
        out["n_unique"] = 0
        out["cardinality"] = {"min": None, "max": None, "invariant": True}
        out["hamming_consecutive"] = {"min": None, "max": None, "all_two": True}
        out["feasible"] = {"checked": constraints is not None, "n_violating": 0, "violations_by_row": {}}
        out["min_slack_by_row"] = []
        out["inclusion_freq"] = [None] * num_var
        return out

    out["n_unique"] = int(np.unique(s, axis=0).shape[0])

    pop = s.sum(axis=1)
    card: dict[str, Any] = {"min": int(pop.min()), "max": int(pop.max())}
    if init is not None:
        x0 = np.asarray(init).reshape(-1)
        card["init"] = int(x0.sum())
        card["invariant"] = bool((pop == card["init"]).all())
        seq = np.vstack([x0.reshape(1, -1), s])
    else:
        card["invariant"] = bool(pop.min() == pop.max())
        seq = s
    out["cardinality"] = card

    if seq.shape[0] >= 2:
        ham = (seq[1:] != seq[:-1]).sum(axis=1)
        out["hamming_consecutive"] = {
            "min": int(ham.min()),
            "max": int(ham.max()),
            "all_two": bool((ham == 2).all()),
        }
    else:
        out["hamming_consecutive"] = {"min": None, "max": None, "all_two": True}

    by_row: dict[str, int] = {}
    n_violating = 0
    min_slack: list[float] = []
    if constraints is not None:
        # Tightest slack each row reached over the chain; negative means violated.
        slack = np.vstack([row_slack(row, constraints) for row in s])
        min_slack = [float(v) for v in slack.min(axis=0)] if constraints.num_constraints else []
        for row in s:
            bad = violated_rows(row, constraints)
            if bad.size:
                n_violating += 1
                for i in bad.tolist():
                    by_row[str(i)] = by_row.get(str(i), 0) + 1
    out["feasible"] = {"checked": constraints is not None, "n_violating": n_violating, "violations_by_row": by_row}
    out["min_slack_by_row"] = min_slack

    out["inclusion_freq"] = [float(v) for v in s.mean(axis=0)]
    return out
