# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any


def _parse_bool(raw: Any, *, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    s = str(raw).strip().lower()
    if not s:
        return default
    if s in ("1", "true", "yes", "y", "on"):
        return True
    if s in ("0", "false", "no", "n", "off"):
        return False
    return default


def _parse_int(raw: Any, *, default: int, min_v: int, max_v: int) -> int:
    try:
        if raw is None:
            v = default
        elif isinstance(raw, int):
            v = raw
        else:
            v = int(str(raw).strip())
    except (TypeError, ValueError):
        v = default
    return max(min_v, min(max_v, v))


def _parse_float(raw: Any, *, default: float, min_v: float, max_v: float) -> float:
    try:
        if raw is None:
            v = default
        elif isinstance(raw, (int, float)):
            v = float(raw)
        else:
            v = float(str(raw).strip())
    except (TypeError, ValueError):
        v = default
    return max(min_v, min(max_v, v))


@dataclass(frozen=True)
class EngineFeatureFlags:
    # Trace is a local-only debug feature; enabled by default, can be disabled via env.
    trace_enabled: bool = True
    # One extra cascade call to repair malformed analysis JSON.
    json_repair: bool = True


@dataclass(frozen=True)
class EngineLLMConfig:
    timeout_sec: float = 60.0
    max_retries: int = 1


@dataclass(frozen=True)
class EngineVerificationConfig:
    head_timeout_sec: float = 8.0
    get_timeout_sec: float = 10.0
    max_url_scan_results: int = 6


@dataclass(frozen=True)
class EngineBatchConfig:
    batch_size: int = 3
    delay_sec: float = 1.0


@dataclass(frozen=True)
class EngineRuntimeConfig:
    llm: EngineLLMConfig
    features: EngineFeatureFlags
    verification: EngineVerificationConfig
    batch: EngineBatchConfig

    @staticmethod
    def default() -> "EngineRuntimeConfig":
        return EngineRuntimeConfig(
            llm=EngineLLMConfig(),
            features=EngineFeatureFlags(),
            verification=EngineVerificationConfig(),
            batch=EngineBatchConfig(),
        )

    @staticmethod
    def load_from_env() -> "EngineRuntimeConfig":
        llm = EngineLLMConfig(
            timeout_sec=_parse_float(os.getenv("OPENAI_TIMEOUT"), default=60.0, min_v=5.0, max_v=300.0),
            max_retries=_parse_int(os.getenv("OPENAI_MAX_RETRIES"), default=1, min_v=0, max_v=5),
        )
        features = EngineFeatureFlags(
            trace_enabled=_parse_bool(os.getenv("BRIDGE_TRACE_ENABLED"), default=True),
            json_repair=_parse_bool(os.getenv("BRIDGE_JSON_REPAIR"), default=True),
        )
        verification = EngineVerificationConfig(
            head_timeout_sec=_parse_float(
                os.getenv("BRIDGE_VERIFY_HEAD_TIMEOUT"), default=8.0, min_v=0.5, max_v=60.0
            ),
            get_timeout_sec=_parse_float(
                os.getenv("BRIDGE_VERIFY_GET_TIMEOUT"), default=10.0, min_v=0.5, max_v=60.0
            ),
            max_url_scan_results=_parse_int(os.getenv("BRIDGE_URL_SCAN_MAX"), default=6, min_v=1, max_v=12),
        )
        batch = EngineBatchConfig(
            batch_size=_parse_int(os.getenv("BRIDGE_BATCH_SIZE"), default=3, min_v=1, max_v=10),
            delay_sec=_parse_float(os.getenv("BRIDGE_BATCH_DELAY"), default=1.0, min_v=0.0, max_v=5.0),
        )
        return EngineRuntimeConfig(llm=llm, features=features, verification=verification, batch=batch)

    def to_safe_log_dict(self) -> dict[str, Any]:
        return {
            "llm": {"timeout_sec": self.llm.timeout_sec, "max_retries": self.llm.max_retries},
            "features": {
                "trace_enabled": self.features.trace_enabled,
                "json_repair": self.features.json_repair,
            },
            "verification": {
                "head_timeout_sec": self.verification.head_timeout_sec,
                "get_timeout_sec": self.verification.get_timeout_sec,
                "max_url_scan_results": self.verification.max_url_scan_results,
            },
            "batch": {"batch_size": self.batch.batch_size, "delay_sec": self.batch.delay_sec},
        }
