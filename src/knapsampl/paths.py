from __future__ import annotations

import os
import pathlib


def project_root() -> pathlib.Path:
    # src/knapsampl/paths.py -> repo root is 2 parents up.
    return pathlib.Path(__file__).resolve().parents[2]


def output_root() -> pathlib.Path:
    """
    Output root resolution (KISS):
    1) KNAPSAMPL_OUTPUT_ROOT (explicit)
    2) <repo>/outputs
    """
    explicit = os.environ.get("KNAPSAMPL_OUTPUT_ROOT")
    if explicit:
        return pathlib.Path(explicit).expanduser().resolve()
    return project_root() / "outputs"


def ensure_dir(path: pathlib.Path) -> pathlib.Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
