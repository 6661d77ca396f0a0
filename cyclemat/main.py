from __future__ import annotations

import sys
from typing import Optional, Sequence

from .cli_parser import build_parser
from .config import Config, load_config
from .cycles import is_graph_cyclic
from .errors import MatrixError
from .io import load_csv_matrix
from .trace import PipelineTraceLogger
from .workers import resolve_workers


def _fail(msg: str) -> None:
    print(f"[cyclemat] error: {msg}", file=sys.stderr)
    raise SystemExit(2)


def _effective_config(args) -> Config:
    cfg = load_config(args.config) if args.config else Config()
    if args.workers:
        cfg.pipeline.workers = args.workers
    if args.batch_size:
        if args.batch_size < 1:
            raise ValueError("--batch-size must be >= 1")
        cfg.pipeline.batch_size = int(args.batch_size)
    if args.trace:
        cfg.trace.enabled = True
    if args.trace_out:
        cfg.trace.out = args.trace_out
    return cfg


def _cmd_check(args) -> None:
    if not args.file_location:
        return
    try:
        cfg = _effective_config(args)
        workers = resolve_workers(cfg.pipeline.workers)
        adjacency = load_csv_matrix(args.file_location)
        tracer = PipelineTraceLogger(cfg.trace.out, enabled=cfg.trace.enabled)
    except (MatrixError, OSError, ValueError) as exc:
        _fail(str(exc))

    try:
        print("Original matrix:")
        print(adjacency)
        cyclic = is_graph_cyclic(
            adjacency,
            workers=workers,
            batch_size=cfg.pipeline.batch_size,
            tracer=tracer if tracer.enabled else None,
        )
    except MatrixError as exc:
        _fail(str(exc))
    finally:
        tracer.close()
    print("Is it cyclic?")
    print("true" if cyclic else "false")
    if tracer.enabled:
        print(f"[cyclemat] wrote trace {cfg.trace.out}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    p = build_parser(cmd_check=_cmd_check)
    args = p.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        raise SystemExit("no command selected")
    func(args)


if __name__ == "__main__":
    main()
