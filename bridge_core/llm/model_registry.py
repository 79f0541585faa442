# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Model Registry

Canonical model identifiers and the ranked cascades used per analysis mode.
Presets are plain configuration values passed into the pipeline; nothing
here is consulted as module-level state at call time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ModelID(str, Enum):
    """Canonical model identifiers for cascade routing."""

    # Web-search capable tier (evidence gathering)
    WEB_SEARCH = "openai/gpt-5.2-chat"

    # Fast tier
    FLASH = "gemini-2.5-flash"
    NANO = "openai/gpt-5-nano"

    # Quality tier
    PRO = "gemini-2.5-pro"


class AnalysisMode(str, Enum):
    FAST = "fast"
    QUALITY = "quality"


@dataclass(frozen=True)
class ModelPresets:
    """
    Ranked model cascades keyed by analysis mode.

    Attributes:
        fast: Analysis cascade for AnalysisMode.FAST
        quality: Analysis cascade for AnalysisMode.QUALITY
        evidence: Cascade for web evidence gathering (mode independent)
    """

    fast: tuple[str, ...] = (ModelID.FLASH.value, ModelID.NANO.value)
    quality: tuple[str, ...] = (ModelID.PRO.value, ModelID.FLASH.value, ModelID.WEB_SEARCH.value)
    evidence: tuple[str, ...] = (ModelID.WEB_SEARCH.value, ModelID.PRO.value, ModelID.FLASH.value)

    def analysis_models(self, mode: AnalysisMode | str) -> list[str]:
        if AnalysisMode(mode) is AnalysisMode.FAST:
            return list(self.fast)
        return list(self.quality)

    def evidence_models(self) -> list[str]:
        return list(self.evidence)


DEFAULT_MODEL_PRESETS = ModelPresets()
