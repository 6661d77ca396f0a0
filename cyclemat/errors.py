"""Error taxonomy for matrix construction, multiplication and loading.

All matrix errors derive from ``MatrixError`` (a ``ValueError``) so callers can
catch the whole family at one boundary.  Channel misuse is a programming error
and derives from ``RuntimeError`` instead.
"""

from __future__ import annotations


class MatrixError(ValueError):
    pass


class DimensionError(MatrixError):
    """rows or columns is not strictly positive."""


class ShapeMismatchError(MatrixError):
    """Supplied entries (or a second operand) do not match the stated shape."""


class IncompatibleDimensionsError(MatrixError):
    """Operands fail the ``left.rows == right.columns`` multiply contract."""


class InvalidPowerError(MatrixError):
    """Exponentiation requested with a power <= 0."""


class MatrixParseError(MatrixError):
    """A matrix file could not be turned into integer entries."""


class ChannelClosedError(RuntimeError):
    pass


class ChannelFullError(RuntimeError):
    pass
