from __future__ import annotations

"""
End-to-end run: config -> constraints -> initial state -> chain -> outputs.

Outputs under `out_dir`:
- samples.csv        one row per accepted sample, columns x0..x{n-1}
- run_summary.json   run id, chain meta, chain metrics, resolved sampling config
"""

import datetime as _dt
import json
import pathlib
from dataclasses import replace
from typing import Any

import numpy as np

from ..config import ProblemSpec, problem_from_config
from ..paths import ensure_dir
from ..sampling.chain import sample_chain
from ..solver.initial_state import init_state
from ..validation.chain_stats import compute_chain_metrics


def _require_pandas() -> Any:
    try:
        import pandas as pd  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("Reading/writing sample tables requires pandas (pip install pandas).") from e
    return pd


def make_run_id(*, prefix: str = "knapsampl") -> str:
    ts = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat()
    return f"{ts.replace(':', '').replace('-', '')}_{prefix}"


def resolve_init(problem: ProblemSpec, *, rng: np.random.Generator) -> tuple[np.ndarray, str]:
    """Starting vector and where it came from ("config" or "milp")."""
    if problem.init is not None:
        return np.asarray(problem.init, dtype=np.int8), "config"
    x0 = init_state(
        problem.num_var,
        obj_vec=problem.objective,
        constraints=problem.constraints,
        rng=rng,
    )
    return x0, "milp"


def write_samples(samples: Any, path: pathlib.Path) -> pathlib.Path:
    pd = _require_pandas()
    s = np.asarray(samples)
    df = pd.DataFrame(s, columns=[f"x{i}" for i in range(int(s.shape[1]))])
    df.to_csv(path, index=False)
    return path


def read_samples(path: str | pathlib.Path) -> np.ndarray:
    pd = _require_pandas()
    df = pd.read_csv(pathlib.Path(path).expanduser().resolve())
    return df.to_numpy(dtype=np.int8)


def run_sampling(
    *,
    cfg: dict[str, Any],
    out_dir: pathlib.Path,
    seed: int | None = None,
    num_sampl: int | None = None,
    max_iter: int | None = None,
    run_id: str | None = None,
) -> dict[str, Any]:
    """
    Run one chain from a config dict and write its outputs.

    Keyword overrides (seed/num_sampl/max_iter) take precedence over the
    config's `sampling` section. One random source is shared by the default
    MILP objective and the chain, so a seed fixes the whole run.
    """
    problem = problem_from_config(cfg)
    sc = problem.sampling
    if seed is not None:
        sc = replace(sc, seed=int(seed))
    if num_sampl is not None:
        sc = replace(sc, num_sampl=int(num_sampl))
    if max_iter is not None:
        sc = replace(sc, max_iter=int(max_iter))

    rng = np.random.default_rng(sc.seed)
    x0, init_source = resolve_init(problem, rng=rng)

    samples, meta = sample_chain(
        x0,
        sc.num_sampl,
        sc.max_iter,
        problem.constraints,
        rng=rng,
        check_init=sc.check_init,
        return_meta=True,
    )
    metrics = compute_chain_metrics(
        samples=samples,
        init=x0,
        constraints=problem.constraints,
        requested=sc.num_sampl,
    )

    out_dir = ensure_dir(pathlib.Path(out_dir).expanduser().resolve())
    samples_path = write_samples(samples, out_dir / "samples.csv")

    summary = {
        "run_id": run_id or make_run_id(),
        "sampling": sc.to_dict(),
        "init": {"source": init_source, "vector": x0.tolist(), "cardinality": int(x0.sum())},
        "constraints": None if problem.constraints is None else problem.constraints.to_dict(),
        "chain": meta,
        "metrics": metrics,
        "outputs": {"samples": str(samples_path)},
    }
    (out_dir / "run_summary.json").write_text(
        json.dumps(summary, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )
    return summary
