import contextlib
import io
import json
import pathlib
import tempfile
import unittest


def _small_cfg() -> dict:
    g = [[1, 1, 1, 0, 0, 0, 0, 0], [0, 0, 0, 1, 1, 1, 0, 0]]
    return {
        "num_var": 8,
        "constraints": [
            {"matrix": [[1] * 8], "dir": ["=="], "rhs": [3]},
            {"matrix": g, "dir": ["<=", "<="], "rhs": [2, 2]},
            {"matrix": g, "dir": [">=", ">="], "rhs": [1, 1]},
        ],
        "init": [1, 0, 0, 1, 0, 0, 1, 0],
        "sampling": {"num_sampl": 10, "max_iter": 40, "seed": 3, "check_init": True},
    }


class TestRunSamplingSmoke(unittest.TestCase):
    def setUp(self) -> None:
        try:
            import numpy  # noqa: F401
            import pandas  # noqa: F401
        except Exception:
            self.skipTest("numpy/pandas not installed")

    def test_run_sampling_writes_outputs(self) -> None:
        from src.knapsampl.pipeline.run_sampling import read_samples, run_sampling

        with tempfile.TemporaryDirectory() as td:
            out_dir = pathlib.Path(td) / "run"
            summary = run_sampling(cfg=_small_cfg(), out_dir=out_dir, run_id="test_run")

            self.assertEqual(summary["run_id"], "test_run")
            self.assertEqual(summary["init"]["source"], "config")
            self.assertTrue((out_dir / "samples.csv").exists())
            self.assertTrue((out_dir / "run_summary.json").exists())

            samples = read_samples(out_dir / "samples.csv")
            self.assertEqual(samples.shape[0], summary["chain"]["accepted"])
            self.assertEqual(samples.shape[1], 8)
            self.assertTrue((samples.sum(axis=1) == 3).all())

            on_disk = json.loads((out_dir / "run_summary.json").read_text(encoding="utf-8"))
            self.assertEqual(on_disk["metrics"]["feasible"]["n_violating"], 0)
            self.assertTrue(on_disk["metrics"]["cardinality"]["invariant"])
            self.assertTrue(on_disk["metrics"]["hamming_consecutive"]["all_two"])
            self.assertEqual(on_disk["constraints"]["dir"], ["==", "<=", "<=", ">=", ">="])
            self.assertEqual(len(on_disk["metrics"]["min_slack_by_row"]), 5)

    def test_overrides_and_reproducibility(self) -> None:
        from src.knapsampl.pipeline.run_sampling import read_samples, run_sampling

        with tempfile.TemporaryDirectory() as td:
            a = run_sampling(cfg=_small_cfg(), out_dir=pathlib.Path(td) / "a", seed=9, num_sampl=4, max_iter=100)
            b = run_sampling(cfg=_small_cfg(), out_dir=pathlib.Path(td) / "b", seed=9, num_sampl=4, max_iter=100)
            self.assertEqual(a["sampling"]["seed"], 9)
            self.assertEqual(a["chain"]["requested"], 4)
            self.assertEqual(a["chain"]["max_iter"], 100)
            sa = read_samples(pathlib.Path(td) / "a" / "samples.csv")
            sb = read_samples(pathlib.Path(td) / "b" / "samples.csv")
            self.assertEqual(sa.tolist(), sb.tolist())

    def test_infeasible_init_fails_fast(self) -> None:
        from src.knapsampl.errors import InfeasibleInitialState
        from src.knapsampl.pipeline.run_sampling import run_sampling

        cfg = _small_cfg()
        cfg["init"] = [1, 1, 1, 0, 0, 0, 0, 0]
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(InfeasibleInitialState):
                run_sampling(cfg=cfg, out_dir=pathlib.Path(td))

    def test_init_from_solver(self) -> None:
        try:
            from scipy.optimize import milp  # noqa: F401
        except Exception:
            self.skipTest("scipy>=1.9 not installed")

        from src.knapsampl.pipeline.run_sampling import run_sampling

        cfg = _small_cfg()
        del cfg["init"]
        with tempfile.TemporaryDirectory() as td:
            summary = run_sampling(cfg=cfg, out_dir=pathlib.Path(td))
            self.assertEqual(summary["init"]["source"], "milp")
            self.assertEqual(summary["init"]["cardinality"], 3)

    def test_cli_sample_and_diagnose(self) -> None:
        from src.knapsampl.cli import main

        with tempfile.TemporaryDirectory() as td:
            cfg_path = pathlib.Path(td) / "small.json"
            cfg_path.write_text(json.dumps(_small_cfg()), encoding="utf-8")
            out_dir = pathlib.Path(td) / "out"

            buf = io.StringIO()
            with contextlib.redirect_stdout(buf), contextlib.redirect_stderr(io.StringIO()):
                main(["sample", "--config", str(cfg_path), "--out_dir", str(out_dir)])
            printed = json.loads(buf.getvalue())
            self.assertIn("chain", printed)
            self.assertTrue((out_dir / "samples.csv").exists())

            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                main(["diagnose", "--config", str(cfg_path), "--samples", str(out_dir / "samples.csv")])
            metrics = json.loads(buf.getvalue())
            self.assertEqual(metrics["feasible"]["n_violating"], 0)
            self.assertEqual(metrics["n_samples"], printed["chain"]["accepted"])

    def test_cli_diagnose_uses_run_summary(self) -> None:
        from src.knapsampl.cli import main

        with tempfile.TemporaryDirectory() as td:
            cfg_path = pathlib.Path(td) / "small.json"
            cfg_path.write_text(json.dumps(_small_cfg()), encoding="utf-8")
            out_dir = pathlib.Path(td) / "out"

            buf = io.StringIO()
            with contextlib.redirect_stdout(buf), contextlib.redirect_stderr(io.StringIO()):
                main(
                    [
                        "sample",
                        "--config",
                        str(cfg_path),
                        "--out_dir",
                        str(out_dir),
                        "--num_sampl",
                        "2",
                        "--max_iter",
                        "50",
                    ]
                )
            chain = json.loads(buf.getvalue())["chain"]
            self.assertEqual(chain["requested"], 2)

            # Diagnose against a config without `init` (as for a solver-started run);
            # requested and init must come from the run summary, not the config.
            no_init = _small_cfg()
            del no_init["init"]
            no_init_path = pathlib.Path(td) / "no_init.json"
            no_init_path.write_text(json.dumps(no_init), encoding="utf-8")

            buf = io.StringIO()
            with contextlib.redirect_stdout(buf), contextlib.redirect_stderr(io.StringIO()):
                main(["diagnose", "--config", str(no_init_path), "--samples", str(out_dir / "samples.csv")])
            metrics = json.loads(buf.getvalue())
            self.assertEqual(metrics["requested"], 2)
            self.assertEqual(metrics["shortfall"], 2 - chain["accepted"])
            self.assertEqual(metrics["cardinality"]["init"], 3)
            self.assertTrue(metrics["hamming_consecutive"]["all_two"])

            # Explicit --summary pointing nowhere is an error.
            with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit):
                    main(
                        [
                            "diagnose",
                            "--config",
                            str(no_init_path),
                            "--samples",
                            str(out_dir / "samples.csv"),
                            "--summary",
                            str(pathlib.Path(td) / "missing.json"),
                        ]
                    )

    def test_check_init_must_be_bool(self) -> None:
        from src.knapsampl.config import sampling_config

        self.assertFalse(sampling_config({"sampling": {"check_init": False}}).check_init)
        self.assertTrue(sampling_config({}).check_init)
        for bad in ("false", "no", 0, 1, None):
            with self.assertRaises(ValueError):
                sampling_config({"sampling": {"check_init": bad}})

    def test_yaml_example_config(self) -> None:
        try:
            import yaml  # noqa: F401
        except Exception:
            self.skipTest("PyYAML not installed")

        from src.knapsampl.config import load_config, problem_from_config

        root = pathlib.Path(__file__).resolve().parents[1]
        problem = problem_from_config(load_config(root / "configs" / "group_quota_small.yaml"))
        self.assertEqual(problem.num_var, 12)
        self.assertEqual(problem.constraints.num_constraints, 5)
        self.assertIsNone(problem.init)
        self.assertEqual(problem.sampling.num_sampl, 20)
        self.assertIsNone(problem.sampling.max_iter)


if __name__ == "__main__":
    unittest.main()
