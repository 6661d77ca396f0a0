from __future__ import annotations

import numbers
from typing import Any, Optional, Sequence

import numpy as np

from .errors import (
    DimensionError,
    IncompatibleDimensionsError,
    InvalidPowerError,
    ShapeMismatchError,
)
from .pipeline import pipelined_multiply


def _as_int(x: Any, i: int, j: int) -> int:
    if not isinstance(x, numbers.Integral):
        raise ShapeMismatchError(
            f"entry ({i}, {j}) must be an integer, got {type(x).__name__} {x!r}"
        )
    return int(x)


def _copy_grid(rows: int, columns: int, entries: Sequence[Sequence[Any]]) -> list[list[int]]:
    if len(entries) != rows:
        raise ShapeMismatchError(
            f"provided entries have {len(entries)} rows, expected {rows}"
        )
    grid: list[list[int]] = []
    for i, row in enumerate(entries):
        if len(row) != columns:
            raise ShapeMismatchError(
                f"provided entries row {i} has {len(row)} columns, expected {columns}"
            )
        grid.append([_as_int(x, i, j) for j, x in enumerate(row)])
    return grid


class Matrix:
    """Fixed-shape integer matrix.

    Entries are a list of ``rows`` lists of ``columns`` Python ints, owned by
    this instance (construction copies the caller's grid).  Python ints do not
    overflow, so walk counts of high adjacency powers stay exact.

    ``multiply`` and ``exponentiate`` accept the pipeline options ``workers``,
    ``batch_size`` and ``tracer``; see :mod:`cyclemat.pipeline`.
    """

    __slots__ = ("rows", "columns", "entries")

    def __init__(self, rows: int, columns: int, entries: Optional[Sequence[Sequence[Any]]] = None):
        if rows <= 0 or columns <= 0:
            raise DimensionError("both rows and columns must be greater than 0")
        self.rows = int(rows)
        self.columns = int(columns)
        if entries is None:
            self.entries = [[0] * self.columns for _ in range(self.rows)]
        else:
            self.entries = _copy_grid(self.rows, self.columns, entries)

    # --- constructors -----------------------------------------------------

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        m = cls(n, n)
        for i in range(m.rows):
            m.entries[i][i] = 1
        return m

    @classmethod
    def from_array(cls, arr: Any) -> "Matrix":
        """Build from a 2D integer numpy array or nested sequence."""
        a = np.asarray(arr)
        if a.ndim != 2:
            raise ShapeMismatchError(f"expected a 2D array, got ndim={a.ndim}")
        if a.size and not (np.issubdtype(a.dtype, np.integer) or a.dtype == object):
            raise ShapeMismatchError(f"expected integer entries, got dtype={a.dtype}")
        return cls(int(a.shape[0]), int(a.shape[1]), a.tolist())

    def to_array(self) -> np.ndarray:
        """Entries as a numpy ``object`` array holding the original Python ints."""
        out = np.empty((self.rows, self.columns), dtype=object)
        for i, row in enumerate(self.entries):
            out[i, :] = row
        return out

    def copy(self) -> "Matrix":
        return Matrix(self.rows, self.columns, self.entries)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.columns)

    # --- algebra ------------------------------------------------------------

    def trace(self) -> int:
        total = 0
        for i, row in enumerate(self.entries):
            for j, value in enumerate(row):
                if i == j:
                    total += value
        return total

    def add(self, other: "Matrix") -> "Matrix":
        if self.shape != other.shape:
            raise ShapeMismatchError(f"cannot add {self.shape} and {other.shape} matrices")
        return Matrix(
            self.rows,
            self.columns,
            [[a + b for a, b in zip(ra, rb)] for ra, rb in zip(self.entries, other.entries)],
        )

    __add__ = add

    def multiply(
        self,
        other: "Matrix",
        *,
        workers: int = 1,
        batch_size: int = 1,
        tracer=None,
        multiply_id: int = 0,
    ) -> "Matrix":
        """Left-multiply ``other`` by this matrix through the concurrent pipeline.

        Compatibility is ``self.rows == other.columns`` and the result has shape
        ``self.rows x self.columns``.  For the square matrices used in cycle
        detection this is the ordinary product.
        """
        if self.rows != other.columns:
            raise IncompatibleDimensionsError(
                "matrices are not compatible for matrix multiplication: "
                f"left.rows={self.rows} != right.columns={other.columns}"
            )
        result = Matrix(self.rows, self.columns)
        return pipelined_multiply(
            self,
            other,
            result,
            workers=workers,
            batch_size=batch_size,
            tracer=tracer,
            multiply_id=multiply_id,
        )

    def exponentiate(self, power: int, **pipeline_opts) -> "Matrix":
        """Compute ``self ** power`` for integer ``power >= 1``.

        Each step left-multiplies the running result by the original matrix,
        so ``power - 1`` multiplications run in total.
        """
        if power <= 0:
            raise InvalidPowerError("only integer positive non-zero powers are allowed")
        pipeline_opts.pop("multiply_id", None)
        current = self.copy()
        for step in range(1, power):
            current = self.multiply(current, multiply_id=step, **pipeline_opts)
        return current

    __matmul__ = multiply

    # --- comparison / rendering ----------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and self.entries == other.entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, columns={self.columns}, entries={self.entries!r})"

    def __str__(self) -> str:
        return np.array2string(self.to_array(), separator=" ")
