from __future__ import annotations

import argparse
from typing import Callable


def build_parser(*, cmd_check: Callable) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cyclemat",
        description="Detect cycles in a graph by raising its adjacency matrix to the n-th power",
    )
    p.add_argument(
        "--file-location",
        default="",
        help="Path to a CSV file containing the adjacency matrix",
    )
    p.add_argument("--config", default="", help="YAML config (pipeline and trace settings)")
    p.add_argument("--workers", default="", help="Worker thread count, or 'auto'")
    p.add_argument("--batch-size", type=int, default=0, help="Scalar pairs per channel message")
    p.add_argument("--trace", action="store_true", help="Enable pipeline trace logging")
    p.add_argument("--trace-out", default="", help="Pipeline trace output path")
    p.set_defaults(func=cmd_check)
    return p
