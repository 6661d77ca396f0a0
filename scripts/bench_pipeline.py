from __future__ import annotations

import argparse
import csv
import os
import sys
import time
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cyclemat.matrix import Matrix  # noqa: E402


def _parse_int_list(text: str, name: str) -> list[int]:
    vals: list[int] = []
    for token in str(text).split(","):
        token = token.strip()
        if not token:
            continue
        k = int(token)
        if k < 1:
            raise ValueError(f"{name} values must be >= 1")
        vals.append(k)
    if not vals:
        raise ValueError(f"{name} must contain at least one positive integer")
    return vals


def run_sweep(*, n: int, repeats: int, workers: list[int], batches: list[int], seed: int) -> list[dict]:
    rng = np.random.default_rng(seed)
    a = rng.integers(-9, 10, size=(n, n))
    b = rng.integers(-9, 10, size=(n, n))
    ref = Matrix.from_array(a @ b)
    left, right = Matrix.from_array(a), Matrix.from_array(b)

    rows: list[dict] = []
    for w in workers:
        for bs in batches:
            t0 = time.perf_counter()
            ok = True
            for _ in range(repeats):
                ok = ok and left.multiply(right, workers=w, batch_size=bs) == ref
            dt = time.perf_counter() - t0
            rows.append({
                "n": n,
                "workers": w,
                "batch_size": bs,
                "repeats": repeats,
                "seconds_per_multiply": dt / repeats,
                "ok": ok,
            })
            print(f"[bench] n={n} workers={w} batch={bs} {dt / repeats:.4f}s/multiply ok={ok}", flush=True)
    return rows


def main() -> int:
    ap = argparse.ArgumentParser(description="Sweep worker count and batch size for the multiply pipeline")
    ap.add_argument("--n", type=int, default=30)
    ap.add_argument("--repeats", type=int, default=3)
    ap.add_argument("--workers", default="1,2,4")
    ap.add_argument("--batch-sizes", default="1,16,128")
    ap.add_argument("--seed", type=int, default=1)
    ap.add_argument("--out", default="results/bench_pipeline.csv")
    args = ap.parse_args()

    rows = run_sweep(
        n=int(args.n),
        repeats=int(args.repeats),
        workers=_parse_int_list(args.workers, "workers"),
        batches=_parse_int_list(args.batch_sizes, "batch-sizes"),
        seed=int(args.seed),
    )
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)
    print(f"[bench] wrote {args.out}")
    return 0 if all(r["ok"] for r in rows) else 2


if __name__ == "__main__":
    raise SystemExit(main())
