"""cyclemat package.

Cycle detection through adjacency-matrix powers, computed by a concurrent
multiply pipeline. Version is single-sourced from the repository root VERSION
file.
"""

from __future__ import annotations
from pathlib import Path

from .cycles import is_graph_cyclic
from .errors import (
    DimensionError,
    IncompatibleDimensionsError,
    InvalidPowerError,
    MatrixError,
    MatrixParseError,
    ShapeMismatchError,
)
from .matrix import Matrix

def _read_version() -> str:
    repo_root = Path(__file__).resolve().parents[1]
    try:
        return (repo_root / "VERSION").read_text(encoding="utf-8").strip()
    except OSError:
        return "0.3.0"

__version__ = _read_version()

__all__ = [
    "DimensionError",
    "IncompatibleDimensionsError",
    "InvalidPowerError",
    "Matrix",
    "MatrixError",
    "MatrixParseError",
    "ShapeMismatchError",
    "is_graph_cyclic",
]
