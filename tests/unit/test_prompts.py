# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import json

from bridge_core.agents.prompts import (
    FOCUS_MODE_PROMPTS,
    build_analysis_prompt,
    build_evidence_prompt,
    build_json_repair_prompt,
    format_verified_evidence,
)
from bridge_core.config import StrategicFocus
from tests.fixtures.enrichment_fixtures import make_evidence


def test_evidence_prompt_asks_for_array(contact):
    prompt = build_evidence_prompt(contact, "https://linkedin.com/in/jordan")
    assert "Return ONLY a JSON array." in prompt
    assert "Name: Jordan Example" in prompt
    assert "Known LinkedIn URL: https://linkedin.com/in/jordan" in prompt


def test_evidence_prompt_without_linkedin(contact):
    assert "Known LinkedIn URL: None" in build_evidence_prompt(contact, None)


def test_format_verified_evidence():
    assert format_verified_evidence([]) == "[]"
    rendered = json.loads(format_verified_evidence([make_evidence("https://a.com/x", claim="Board seat")]))
    assert rendered[0]["url"] == "https://a.com/x"
    assert rendered[0]["claim"] == "Board seat"


def test_analysis_prompt_sections_in_order(contact):
    prompt = build_analysis_prompt(
        contact,
        thesis_context="RULE #1: be patient",
        focus_mode=StrategicFocus.GOVT_INTEL,
        linkedin_url=None,
        verified_evidence=[make_evidence("https://a.com/x")],
    )
    headers = [
        "=== THESIS/CONTEXT ===",
        "=== CURRENT STRATEGIC FOCUS ===",
        "=== TARGET CONTACT ===",
        "=== VERIFICATION RULES ===",
        "=== VERIFIED_EVIDENCE ===",
        "=== YOUR TASK ===",
    ]
    positions = [prompt.index(h) for h in headers]
    assert positions == sorted(positions)
    assert "RULE #1: be patient" in prompt
    assert FOCUS_MODE_PROMPTS[StrategicFocus.GOVT_INTEL] in prompt
    assert "https://a.com/x" in prompt
    assert "Known LinkedIn URL: None provided" in prompt


def test_every_focus_mode_has_prompt():
    assert set(FOCUS_MODE_PROMPTS) == set(StrategicFocus)


def test_repair_prompt_embeds_text():
    prompt = build_json_repair_prompt('{"scores": ')
    assert '{"scores": ' in prompt
    assert "Return ONLY raw JSON" in prompt
