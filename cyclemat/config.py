from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Union
import yaml

from .workers import resolve_workers

_ROOT_KEYS = {"pipeline", "trace"}
_PIPELINE_KEYS = {"workers", "batch_size"}
_TRACE_KEYS = {"enabled", "out"}

@dataclass
class PipelineConfig:
    workers: Union[int, str] = 1
    batch_size: int = 1

    def resolved_workers(self) -> int:
        return resolve_workers(self.workers)

@dataclass
class TraceConfig:
    enabled: bool = False
    out: str = "pipeline_trace.csv"

@dataclass
class Config:
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    trace: TraceConfig = field(default_factory=TraceConfig)


def _section(root: dict[str, Any], key: str, allowed: set[str]) -> dict[str, Any]:
    sec = root.get(key, None)
    if sec is None:
        return {}
    if not isinstance(sec, dict):
        raise ValueError(f"{key} must be a mapping")
    extra = sorted(set(sec.keys()) - allowed)
    if extra:
        raise ValueError(f"{key} contains unsupported keys: {extra}")
    return sec


def _parse_workers(raw: Any) -> Union[int, str]:
    if isinstance(raw, str) and raw.strip().lower() == "auto":
        return "auto"
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ValueError("pipeline.workers must be an integer >= 1 or 'auto'")
    return int(raw)


def config_from_dict(d: Optional[dict[str, Any]]) -> Config:
    if d is None:
        return Config()
    if not isinstance(d, dict):
        raise ValueError("config root must be a mapping")
    extra = sorted(set(d.keys()) - _ROOT_KEYS)
    if extra:
        raise ValueError(f"config contains unsupported keys: {extra}")

    pl = _section(d, "pipeline", _PIPELINE_KEYS)
    tr = _section(d, "trace", _TRACE_KEYS)

    batch_size = pl.get("batch_size", 1)
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValueError("pipeline.batch_size must be an integer >= 1")

    out = tr.get("out", "pipeline_trace.csv")
    if not isinstance(out, str) or not out.strip():
        raise ValueError("trace.out must be a non-empty string")

    return Config(
        pipeline=PipelineConfig(
            workers=_parse_workers(pl.get("workers", 1)),
            batch_size=int(batch_size),
        ),
        trace=TraceConfig(
            enabled=bool(tr.get("enabled", False)),
            out=out,
        ),
    )

def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as f:
        d = yaml.safe_load(f)
    return config_from_dict(d)
