from __future__ import annotations

import argparse
import json
import os
import pathlib
import sys

import numpy as np

from .config import load_config, problem_from_config
from .paths import output_root, project_root
from .pipeline.run_sampling import make_run_id, read_samples, run_sampling
from .solver.initial_state import init_state
from .validation.chain_stats import compute_chain_metrics


def _cmd_paths(_: argparse.Namespace) -> None:
    info = {
        "project_root": str(project_root()),
        "output_root": str(output_root()),
        "env": {
            "KNAPSAMPL_OUTPUT_ROOT": os.environ.get("KNAPSAMPL_OUTPUT_ROOT"),
        },
    }
    print(json.dumps(info, ensure_ascii=False, indent=2))


def _cmd_init_state(args: argparse.Namespace) -> None:
    problem = problem_from_config(load_config(args.config))
    seed = problem.sampling.seed if args.seed is None else int(args.seed)
    x0 = init_state(
        problem.num_var,
        obj_vec=problem.objective,
        constraints=problem.constraints,
        seed=seed,
    )
    print(json.dumps({"init": x0.tolist(), "cardinality": int(x0.sum())}, ensure_ascii=False))


def _cmd_sample(args: argparse.Namespace) -> None:
    cfg = load_config(args.config)
    run_id = make_run_id(prefix=pathlib.Path(args.config).stem)
    out_dir = pathlib.Path(args.out_dir).expanduser().resolve() if args.out_dir else (output_root() / run_id)

    summary = run_sampling(
        cfg=cfg,
        out_dir=out_dir,
        seed=args.seed,
        num_sampl=args.num_sampl,
        max_iter=args.max_iter,
        run_id=run_id,
    )

    chain = summary["chain"]
    if chain["accepted"] < chain["requested"]:
        print(
            f"[warn] iteration budget exhausted: {chain['accepted']}/{chain['requested']} sample(s) "
            f"after {chain['iterations']} iteration(s).",
            file=sys.stderr,
        )
        print("[hint] raise --max_iter or relax the constraints.", file=sys.stderr)
    print(f"[ok] wrote: {out_dir}/samples.csv and {out_dir}/run_summary.json", file=sys.stderr)
    print(json.dumps({"run_id": summary["run_id"], "chain": chain}, ensure_ascii=False, indent=2))


def _cmd_diagnose(args: argparse.Namespace) -> None:
    problem = problem_from_config(load_config(args.config))
    samples_path = pathlib.Path(args.samples).expanduser().resolve()
    samples = read_samples(samples_path)

    # The run summary records what the chain actually ran with (CLI overrides, solved init).
    summary_path = (
        pathlib.Path(args.summary).expanduser().resolve() if args.summary else samples_path.parent / "run_summary.json"
    )
    init_vec = problem.init
    requested = problem.sampling.num_sampl
    if summary_path.exists():
        run = json.loads(summary_path.read_text(encoding="utf-8"))
        init_vec = run["init"]["vector"]
        requested = int(run["chain"]["requested"])
    elif args.summary:
        raise SystemExit(f"run summary not found: {summary_path}")
    else:
        print(f"[info] no run summary at {summary_path}; using config init/num_sampl.", file=sys.stderr)

    init = np.asarray(init_vec, dtype=np.int8) if init_vec is not None else None
    metrics = compute_chain_metrics(
        samples=samples,
        init=init,
        constraints=problem.constraints,
        requested=requested,
    )
    if metrics["feasible"]["n_violating"]:
        print(f"[warn] {metrics['feasible']['n_violating']} sample(s) violate the constraints.", file=sys.stderr)
    print(json.dumps(metrics, ensure_ascii=False, indent=2))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="knapsampl")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_paths = sub.add_parser("paths", help="Print resolved project/output paths (JSON).")
    p_paths.set_defaults(func=_cmd_paths)

    p_init = sub.add_parser("init-state", help="Solve for one feasible binary vector (JSON).")
    p_init.add_argument("--config", required=True, help="Problem config (.json/.yaml).")
    p_init.add_argument("--seed", type=int, default=None, help="Seed for the random objective (default: config).")
    p_init.set_defaults(func=_cmd_init_state)

    p_sample = sub.add_parser("sample", help="Run the constrained MCMC and write samples.csv + run_summary.json.")
    p_sample.add_argument("--config", required=True, help="Problem config (.json/.yaml).")
    p_sample.add_argument("--out_dir", default=None, help="Default: <output_root>/<run_id>.")
    p_sample.add_argument("--seed", type=int, default=None, help="Override sampling.seed.")
    p_sample.add_argument("--num_sampl", type=int, default=None, help="Override sampling.num_sampl.")
    p_sample.add_argument("--max_iter", type=int, default=None, help="Override sampling.max_iter (default: 2*num_sampl).")
    p_sample.set_defaults(func=_cmd_sample)

    p_diag = sub.add_parser("diagnose", help="Check a samples.csv against a config (JSON).")
    p_diag.add_argument("--config", required=True, help="Problem config (.json/.yaml).")
    p_diag.add_argument("--samples", required=True, help="samples.csv written by `sample`.")
    p_diag.add_argument(
        "--summary",
        default=None,
        help="run_summary.json of the run (default: next to --samples, if present).",
    )
    p_diag.set_defaults(func=_cmd_diagnose)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
