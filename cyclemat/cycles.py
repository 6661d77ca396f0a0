from __future__ import annotations

from .errors import ShapeMismatchError
from .matrix import Matrix


def is_graph_cyclic(adjacency: Matrix, **pipeline_opts) -> bool:
    """Return True when A^n has a nonzero trace, n being the node count.

    Entry (i, j) of A^n counts the walks of exactly n steps from i to j, so a
    nonzero diagonal means some node lies on a closed walk of length n.  Every
    closed walk contains a cycle, and an acyclic graph has no closed walks at
    all.  Works for directed and undirected adjacency matrices.
    """
    if adjacency.rows != adjacency.columns:
        raise ShapeMismatchError(
            "cycle detection requires a square adjacency matrix, "
            f"got {adjacency.rows}x{adjacency.columns}"
        )
    raised = adjacency.exponentiate(adjacency.rows, **pipeline_opts)
    return raised.trace() != 0
