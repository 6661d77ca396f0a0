from __future__ import annotations
import csv
import os
import threading
import time
import warnings

_COLUMNS = ["wall_time", "multiply_id", "worker_id", "event", "messages", "products"]

class PipelineTraceLogger:
    """CSV event log for multiply pipelines.

    Rows are written from worker threads as well as the caller, so writes are
    serialized under a lock and flushed immediately.  ``worker_id`` is -1 for
    events emitted by the coordinating thread.
    """

    def __init__(self, path: str, *, enabled: bool = True):
        self.enabled = bool(enabled)
        self.start = time.perf_counter()
        self.path = path
        self._lock = threading.Lock()
        if not self.enabled:
            self._f = None
            self._w = None
            return
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self._f = open(path, "w", newline="", encoding="utf-8")
        self._w = csv.writer(self._f)
        self._w.writerow(_COLUMNS)
        self._f.flush()

    def log(self, *, multiply_id: int, worker_id: int, event: str,
            messages: int = 0, products: int = 0):
        if not self.enabled or self._w is None:
            return
        wall = time.perf_counter() - self.start
        with self._lock:
            self._w.writerow([
                f"{wall:.6f}",
                int(multiply_id),
                int(worker_id),
                str(event),
                int(messages),
                int(products),
            ])
            self._f.flush()

    def close(self):
        try:
            if self._f is not None:
                self._f.close()
        except OSError as exc:
            warnings.warn(
                f"PipelineTraceLogger.close() failed for {self.path!r}: {exc!r}",
                RuntimeWarning,
            )
        finally:
            self._w = None

    def __enter__(self) -> "PipelineTraceLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
