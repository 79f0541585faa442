# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

import contextvars
import json
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from bridge_core.runtime_config import EngineRuntimeConfig
from bridge_core.utils.runtime import is_local_run

_trace_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("bridge_trace_id", default=None)
_trace_enabled_var: contextvars.ContextVar[bool] = contextvars.ContextVar("bridge_trace_enabled", default=False)

TRACE_DIR = Path("data/trace")

_SECRET_KEYS = frozenset({"authorization", "api_key", "key", "openai_api_key", "token", "password"})

# Applied in order to every string that lands in a trace record.
_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"([?&](?:key|api_key|access_token|token)=)[^&\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._-]+", re.IGNORECASE), r"\1***"),
    # Contact records routinely carry personal email addresses.
    (re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"), "***@***"),
)

# Model responses and prompts are the long strings; keep a preview only.
MAX_TRACE_STR = 4000
PREVIEW_CHARS = 300
MAX_TRACE_ITEMS = 100


def _redact_text(s: str) -> str:
    for pattern, replacement in _REDACTIONS:
        s = pattern.sub(replacement, s)
    return s


def _sanitize(obj: Any) -> Any:
    """Make a trace payload JSON-safe: redact secrets, mask secret keys, cap long values."""
    if obj is None or isinstance(obj, (bool, int, float)):
        return obj
    if isinstance(obj, BaseModel):
        return _sanitize(obj.model_dump(mode="json", by_alias=True))
    if isinstance(obj, dict):
        return {
            str(k): "***" if str(k).lower() in _SECRET_KEYS else _sanitize(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        out = [_sanitize(x) for x in obj[:MAX_TRACE_ITEMS]]
        if len(obj) > MAX_TRACE_ITEMS:
            out.append(f"...(+{len(obj) - MAX_TRACE_ITEMS} more)")
        return out
    s = _redact_text(str(obj))
    if len(s) <= MAX_TRACE_STR:
        return s
    return {"len": len(s), "head": s[:PREVIEW_CHARS]}


def trace_enabled() -> bool:
    return _trace_enabled_var.get()


def current_trace_id() -> str | None:
    return _trace_id_var.get()


def trace_path(trace_id: str) -> Path:
    safe_tid = re.sub(r"[^A-Za-z0-9._-]", "_", trace_id)
    return TRACE_DIR / f"{safe_tid}.jsonl"


@dataclass(frozen=True)
class TraceContext:
    trace_id: str
    enabled: bool


class Trace:
    """
    Local-only JSONL sink for debugging enrichment runs.

    One file per trace id under `data/trace/`. Enabled only when the
    process runs in a local/dev/test environment and the runtime feature
    flag allows it; every record passes through `_sanitize` first.
    """

    @staticmethod
    def start(trace_id: str, *, runtime: EngineRuntimeConfig | None = None) -> TraceContext:
        runtime = runtime or EngineRuntimeConfig.load_from_env()
        enabled = bool(is_local_run() and runtime.features.trace_enabled)
        _trace_id_var.set(trace_id)
        _trace_enabled_var.set(enabled)
        Trace.event("trace.start", {"trace_id": trace_id, "started_at": time.strftime("%Y-%m-%d %H:%M:%S")})
        return TraceContext(trace_id=trace_id, enabled=enabled)

    @staticmethod
    def stop() -> None:
        Trace.event("trace.stop", {"trace_id": current_trace_id()})
        _trace_enabled_var.set(False)
        _trace_id_var.set(None)

    @staticmethod
    def event(name: str, data: Any | None = None) -> None:
        tid = current_trace_id()
        if not (trace_enabled() and tid):
            return
        record = {
            "ts_ms": int(time.time() * 1000),
            "trace_id": tid,
            "event": name,
            "data": _sanitize(data),
        }
        try:
            TRACE_DIR.mkdir(parents=True, exist_ok=True)
            with trace_path(tid).open("a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError:
            # Tracing must never break the main flow.
            return
