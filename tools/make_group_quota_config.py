#!/usr/bin/env python3
"""
Write a grouped-quota knapsack config (JSON) for `knapsampl sample`.

Problem shape:
- exactly `total` variables switched on (one equality row over all variables)
- variables split into consecutive groups of `group_len`; the first `n_groups`
  groups get a cap ("<=") and a floor (">=") on how many of their variables are on

Defaults reproduce the classic 100-variable example: total=20, two groups of 10
with caps (5, 5) and floors (1, 2).
"""

from __future__ import annotations

import argparse
import json
import pathlib


def _group_rows(*, num_var: int, group_len: int, n_groups: int) -> list[list[float]]:
    rows: list[list[float]] = []
    for g in range(n_groups):
        row = [0.0] * num_var
        for j in range(g * group_len, (g + 1) * group_len):
            row[j] = 1.0
        rows.append(row)
    return rows


def _int_list(s: str) -> list[int]:
    return [int(v) for v in s.split(",") if v.strip()]


def main() -> None:
    p = argparse.ArgumentParser(prog="make_group_quota_config")
    p.add_argument("--num_var", type=int, default=100)
    p.add_argument("--group_len", type=int, default=10)
    p.add_argument("--total", type=int, default=20, help="Required number of 1-bits.")
    p.add_argument("--caps", type=_int_list, default=[5, 5], help="Comma-separated per-group caps.")
    p.add_argument("--floors", type=_int_list, default=[1, 2], help="Comma-separated per-group floors.")
    p.add_argument("--num_sampl", type=int, default=50)
    p.add_argument("--max_iter", type=int, default=None)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--out", default="configs/group_quota.json")
    args = p.parse_args()

    if len(args.caps) != len(args.floors):
        raise SystemExit(f"--caps and --floors must have the same length ({len(args.caps)} != {len(args.floors)})")
    n_groups = len(args.caps)
    if n_groups * args.group_len > args.num_var:
        raise SystemExit("groups do not fit into num_var")

    g_rows = _group_rows(num_var=args.num_var, group_len=args.group_len, n_groups=n_groups)
    cfg = {
        "num_var": args.num_var,
        "constraints": [
            {"matrix": [[1.0] * args.num_var], "dir": ["=="], "rhs": [args.total]},
            {"matrix": g_rows, "dir": ["<="] * n_groups, "rhs": args.caps},
            {"matrix": g_rows, "dir": [">="] * n_groups, "rhs": args.floors},
        ],
        "sampling": {
            "num_sampl": args.num_sampl,
            "max_iter": args.max_iter,
            "seed": args.seed,
            "check_init": True,
        },
    }

    out = pathlib.Path(args.out).expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(cfg, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    print(f"[ok] wrote: {out}")


if __name__ == "__main__":
    main()
