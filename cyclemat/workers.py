from __future__ import annotations

import os
import warnings
from typing import Union

# Upper bound for "auto": workers share the GIL, more threads only add
# contention on the pairing lock.
MAX_AUTO_WORKERS = 8


def _parse_count(raw: Union[int, str], source: str) -> int:
    try:
        n = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{source} must be an integer >= 1 or 'auto'") from None
    if n < 1:
        raise ValueError(f"{source} must be an integer >= 1 or 'auto'")
    return n


def resolve_workers(req: Union[int, str, None] = "auto", env: dict[str, str] | None = None) -> int:
    """Turn a worker request (int, numeric string or "auto") into a count >= 1.

    "auto" honours the CYCLEMAT_WORKERS environment variable, then falls back
    to the CPU count capped at MAX_AUTO_WORKERS.
    """
    e = os.environ if env is None else env
    if req is None or (isinstance(req, str) and req.strip().lower() in ("", "auto")):
        raw = str(e.get("CYCLEMAT_WORKERS", "")).strip()
        if raw:
            try:
                return _parse_count(raw, "CYCLEMAT_WORKERS")
            except ValueError:
                warnings.warn(
                    f"ignoring invalid CYCLEMAT_WORKERS={raw!r}; using CPU count",
                    RuntimeWarning,
                )
        return max(1, min(MAX_AUTO_WORKERS, os.cpu_count() or 1))
    if isinstance(req, bool):
        raise ValueError("workers must be an integer >= 1 or 'auto'")
    return _parse_count(req, "workers")
