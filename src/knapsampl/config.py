from __future__ import annotations

import json
import pathlib
from dataclasses import asdict, dataclass
from typing import Any

from .constraints.constraint_set import ConstraintSet, combine_blocks


def load_config(path: str | pathlib.Path) -> dict[str, Any]:
    """
    Load a problem config.

    KISS policy:
    - JSON is always supported.
    - YAML is optional (only if PyYAML is installed).
    """
    p = pathlib.Path(path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(p)

    if p.suffix.lower() == ".json":
        return json.loads(p.read_text(encoding="utf-8"))

    if p.suffix.lower() in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("YAML config requires PyYAML (pip install pyyaml).") from e
        return yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    raise ValueError(f"Unsupported config extension: {p.suffix} (use .json/.yaml)")


@dataclass(frozen=True)
class SamplingConfig:
    num_sampl: int = 100
    max_iter: int | None = None
    seed: int | None = 0
    check_init: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, eq=False)
class ProblemSpec:
    num_var: int
    constraints: ConstraintSet | None
    init: list[int] | None
    objective: list[float] | None
    sampling: SamplingConfig


def sampling_config(cfg: dict[str, Any]) -> SamplingConfig:
    s = dict(cfg.get("sampling") or {})
    unknown = sorted(set(s) - {"num_sampl", "max_iter", "seed", "check_init"})
    if unknown:
        raise ValueError(f"unknown sampling keys: {unknown}")
    base = SamplingConfig()
    check_init = s.get("check_init", base.check_init)
    if not isinstance(check_init, bool):
        raise ValueError(f"sampling.check_init must be true or false, got: {check_init!r}")
    return SamplingConfig(
        num_sampl=int(s.get("num_sampl", base.num_sampl)),
        max_iter=None if s.get("max_iter") is None else int(s["max_iter"]),
        seed=None if s.get("seed", base.seed) is None else int(s.get("seed", base.seed)),
        check_init=check_init,
    )


def problem_from_config(cfg: dict[str, Any]) -> ProblemSpec:
    if "num_var" not in cfg:
        raise ValueError("config missing key: num_var")
    num_var = int(cfg["num_var"])
    if num_var <= 0:
        raise ValueError(f"num_var must be positive, got: {num_var}")

    constraints = combine_blocks(cfg.get("constraints") or None, atol=float(cfg.get("atol", 0.0)))

    init = cfg.get("init")
    if init is not None:
        init = [int(v) for v in init]
        if len(init) != num_var:
            raise ValueError(f"init has length {len(init)}, expected num_var={num_var}")

    objective = cfg.get("objective")
    if objective is not None:
        objective = [float(v) for v in objective]

    return ProblemSpec(
        num_var=num_var,
        constraints=constraints,
        init=init,
        objective=objective,
        sampling=sampling_config(cfg),
    )
