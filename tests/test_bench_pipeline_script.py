from __future__ import annotations

import csv
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def test_bench_pipeline_script_writes_csv(tmp_path):
    out_csv = tmp_path / "bench.csv"
    cmd = [
        sys.executable,
        str(ROOT / "scripts" / "bench_pipeline.py"),
        "--n", "6",
        "--repeats", "2",
        "--workers", "1,3",
        "--batch-sizes", "1,8",
        "--out", str(out_csv),
    ]
    proc = subprocess.run(cmd, check=False, capture_output=True, text=True, cwd=str(ROOT))
    assert proc.returncode == 0, proc.stderr or proc.stdout
    with open(out_csv, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 4
    assert all(r["ok"] == "True" for r in rows)
    assert {(r["workers"], r["batch_size"]) for r in rows} == {("1", "1"), ("1", "8"), ("3", "1"), ("3", "8")}
