from __future__ import annotations

import csv
from collections import Counter

from cyclemat.matrix import Matrix
from cyclemat.trace import PipelineTraceLogger


def test_trace_records_multiply_events(tmp_path):
    path = tmp_path / "nested" / "trace.csv"
    a = Matrix(3, 3, [[0, 1, 0], [0, 0, 1], [1, 0, 0]])
    with PipelineTraceLogger(str(path)) as tracer:
        a.exponentiate(3, workers=2, tracer=tracer)

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == [
        "wall_time", "multiply_id", "worker_id", "event", "messages", "products",
    ]
    events = Counter(r["event"] for r in rows)
    assert events["multiply_begin"] == 2
    assert events["multiply_end"] == 2
    assert events["worker_done"] == 4
    ends = [r for r in rows if r["event"] == "multiply_end"]
    assert [r["multiply_id"] for r in ends] == ["1", "2"]
    assert all(int(r["products"]) == 27 for r in ends)
    done = [r for r in rows if r["event"] == "worker_done" and r["multiply_id"] == "1"]
    assert sum(int(r["products"]) for r in done) == 27


def test_trace_disabled_writes_nothing(tmp_path):
    path = tmp_path / "trace.csv"
    tracer = PipelineTraceLogger(str(path), enabled=False)
    tracer.log(multiply_id=0, worker_id=0, event="worker_done")
    tracer.close()
    assert not path.exists()
