# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import pytest

from bridge_core.config import AnalysisSettings, StrategicFocus, normalize_settings
from bridge_core.llm.model_registry import AnalysisMode


def test_defaults():
    s = AnalysisSettings()
    assert s.focus_mode == StrategicFocus.BALANCED
    assert s.analysis_model == AnalysisMode.QUALITY
    assert s.min_evidence_links == 2
    assert s.max_evidence_links == 8
    assert s.min_distinct_domains == 2
    assert s.require_non_linkedin_source is True
    assert s.min_identity_confidence == 60


@pytest.mark.parametrize(
    "raw,expected",
    [(0, 1), (9, 6), (3.6, 4), ("3", 2), (True, 2), (None, 2), (float("nan"), 2)],
)
def test_min_links_clamped(raw, expected):
    assert AnalysisSettings(min_evidence_links=raw).min_evidence_links == expected


def test_max_links_never_below_min():
    s = AnalysisSettings(min_evidence_links=5, max_evidence_links=2)
    assert s.max_evidence_links == 5
    assert AnalysisSettings(max_evidence_links=50).max_evidence_links == 12


def test_camel_case_keys():
    s = normalize_settings(
        {
            "focusMode": "deal_hunter",
            "analysisModel": "fast",
            "minEvidenceLinks": 3,
            "maxEvidenceLinks": 4,
            "minDistinctDomains": 9,
            "requireNonLinkedinSource": False,
            "minIdentityConfidence": 140,
        }
    )
    assert s.focus_mode == StrategicFocus.DEAL_HUNTER
    assert s.analysis_model == AnalysisMode.FAST
    assert s.min_evidence_links == 3
    assert s.max_evidence_links == 4
    assert s.min_distinct_domains == 4
    assert s.require_non_linkedin_source is False
    assert s.min_identity_confidence == 100


def test_nested_analysis_block():
    s = normalize_settings({"theme": "dark", "analysis": {"min_evidence_links": 4}})
    assert s.min_evidence_links == 4


@pytest.mark.parametrize("raw", [None, "settings", 12, ["a"]])
def test_non_mapping_yields_defaults(raw):
    assert normalize_settings(raw) == AnalysisSettings()


def test_wrong_types_fall_back():
    s = normalize_settings({"focusMode": 3, "analysisModel": "turbo", "requireNonLinkedinSource": "no"})
    assert s.focus_mode == StrategicFocus.BALANCED
    assert s.analysis_model == AnalysisMode.QUALITY
    assert s.require_non_linkedin_source is True


def test_unknown_keys_ignored():
    assert normalize_settings({"somethingElse": 1}) == AnalysisSettings()
