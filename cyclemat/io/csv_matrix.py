from __future__ import annotations

import csv
import warnings
from typing import Sequence

from ..errors import MatrixParseError
from ..matrix import Matrix


def read_csv_rows(path: str) -> list[list[str]]:
    with open(path, "r", newline="", encoding="utf-8") as f:
        return [row for row in csv.reader(f) if row]


def parse_rows(rows: Sequence[Sequence[str]]) -> list[list[int]]:
    """Convert a table of strings to ints, naming the first bad cell."""
    out: list[list[int]] = []
    for i, row in enumerate(rows):
        parsed: list[int] = []
        for j, raw in enumerate(row):
            txt = str(raw).strip()
            try:
                parsed.append(int(txt))
            except ValueError:
                raise MatrixParseError(
                    f"row {i + 1}, column {j + 1}: {raw!r} is not an integer"
                ) from None
        out.append(parsed)
    return out


def load_csv_matrix(path: str) -> Matrix:
    """Load a comma-separated integer table as a Matrix.

    Non-square tables only warn; ragged rows are rejected by the Matrix
    constructor.
    """
    rows = parse_rows(read_csv_rows(path))
    if not rows:
        raise MatrixParseError(f"{path}: no matrix rows found")
    n_rows, n_cols = len(rows), len(rows[0])
    if n_rows != n_cols:
        warnings.warn(
            f"only square matrices allowed; {path} is {n_rows}x{n_cols}",
            RuntimeWarning,
        )
    return Matrix(n_rows, n_cols, rows)
