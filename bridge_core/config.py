# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

import math
import os
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from bridge_core.llm.model_registry import AnalysisMode
from bridge_core.runtime_config import EngineRuntimeConfig


class StrategicFocus(str, Enum):
    BALANCED = "BALANCED"
    GATEKEEPER = "GATEKEEPER"
    DEAL_HUNTER = "DEAL_HUNTER"
    GOVT_INTEL = "GOVT_INTEL"


def _clamp_setting(value: Any, fallback: int, min_v: int, max_v: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        value = fallback
    return int(max(min_v, min(max_v, round(value))))


class AnalysisSettings(BaseModel):
    """
    Evidence and quality thresholds for one enrichment run.

    Values never raise on load: wrong types fall back to the default and
    numbers are clamped into range.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel, frozen=True)

    focus_mode: StrategicFocus = Field(StrategicFocus.BALANCED, description="Scoring emphasis for the analysis prompt")
    analysis_model: AnalysisMode = Field(AnalysisMode.QUALITY, description="Which model preset drives analysis")
    min_evidence_links: int = Field(2, description="Verified links required by the evidence gate")
    max_evidence_links: int = Field(8, description="Candidates sent to reachability verification")
    min_distinct_domains: int = Field(2, description="Distinct hostnames required by the evidence gate")
    require_non_linkedin_source: bool = Field(True, description="Reject LinkedIn-only evidence")
    min_identity_confidence: int = Field(60, description="Below this the result needs manual review")

    @field_validator("focus_mode", mode="before")
    @classmethod
    def _coerce_focus(cls, v: Any) -> Any:
        if isinstance(v, str) and v.upper() in StrategicFocus.__members__:
            return StrategicFocus[v.upper()]
        return v if isinstance(v, StrategicFocus) else StrategicFocus.BALANCED

    @field_validator("analysis_model", mode="before")
    @classmethod
    def _coerce_mode(cls, v: Any) -> Any:
        if isinstance(v, AnalysisMode):
            return v
        if isinstance(v, str) and v.strip().lower() in {m.value for m in AnalysisMode}:
            return AnalysisMode(v.strip().lower())
        return AnalysisMode.QUALITY

    @field_validator("min_evidence_links", mode="before")
    @classmethod
    def _clamp_min_links(cls, v: Any) -> int:
        return _clamp_setting(v, 2, 1, 6)

    @field_validator("min_distinct_domains", mode="before")
    @classmethod
    def _clamp_domains(cls, v: Any) -> int:
        return _clamp_setting(v, 2, 1, 4)

    @field_validator("min_identity_confidence", mode="before")
    @classmethod
    def _clamp_identity(cls, v: Any) -> int:
        return _clamp_setting(v, 60, 0, 100)

    @field_validator("require_non_linkedin_source", mode="before")
    @classmethod
    def _strict_bool(cls, v: Any) -> bool:
        return v if isinstance(v, bool) else True

    @model_validator(mode="before")
    @classmethod
    def _clamp_max_links(cls, data: Any) -> Any:
        # The upper cap depends on the (already clamped) lower bound.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_min = data.get("min_evidence_links", data.get("minEvidenceLinks"))
        raw_max = data.pop("max_evidence_links", data.pop("maxEvidenceLinks", None))
        min_links = _clamp_setting(raw_min, 2, 1, 6)
        data["max_evidence_links"] = _clamp_setting(raw_max, 8, min_links, 12)
        return data


def normalize_settings(raw: Any) -> AnalysisSettings:
    """
    Build AnalysisSettings from an untrusted mapping.

    Accepts either the analysis block itself or an application settings
    document holding it under `analysis`; snake_case and camelCase keys are
    both understood. Anything that is not a mapping yields the defaults.
    """
    if not isinstance(raw, dict):
        return AnalysisSettings()
    block = raw.get("analysis") if isinstance(raw.get("analysis"), dict) else raw
    return AnalysisSettings.model_validate(block)


class BridgeConfig(BaseModel):
    """
    Configuration for the Bridge enrichment engine.
    Decouples the engine from environment variables.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # LLM Configuration
    openai_api_key: Optional[str] = Field(None, description="OpenAI API Key for the default chat capability")
    openai_model: str = Field("gpt-5-mini", description="Model used when the cascade falls back to the default")

    # Enrichment thresholds
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    # Timeouts, trace flag, batch pacing
    runtime: EngineRuntimeConfig = Field(default_factory=EngineRuntimeConfig.load_from_env)

    @classmethod
    def from_env(cls, **overrides: Any) -> "BridgeConfig":
        """Read BRIDGE_* variables (OPENAI_API_KEY as a fallback for the key)."""
        analysis = {
            "focus_mode": os.getenv("BRIDGE_FOCUS_MODE"),
            "analysis_model": os.getenv("BRIDGE_ANALYSIS_MODEL"),
        }
        values: dict[str, Any] = {
            "openai_api_key": os.getenv("BRIDGE_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY"),
            "analysis": AnalysisSettings.model_validate({k: v for k, v in analysis.items() if v}),
        }
        model = os.getenv("BRIDGE_OPENAI_MODEL")
        if model:
            values["openai_model"] = model
        values.update(overrides)
        return cls(**values)
