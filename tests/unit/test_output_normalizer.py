# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import pytest

from bridge_core.schema.enrichment import Track
from bridge_core.scoring.normalize import (
    DEFAULT_SUMMARY,
    NO_EVIDENCE_RISK,
    SEED_LINKEDIN_CLAIM,
    normalize_analysis_output,
)
from tests.fixtures.enrichment_fixtures import analysis_payload, make_evidence


@pytest.mark.parametrize("garbage", [None, "not json", 42, [], {"scores": "nope", "enrichment": []}])
def test_garbage_input_yields_defaulted_result(contact, garbage):
    result = normalize_analysis_output(garbage, contact)

    assert result.scores.investor_fit.score == 0
    assert result.scores.investor_fit.confidence == 40
    assert result.scores.investor_fit.reasoning == "Insufficient investor data"
    assert result.scores.connector_score.reasoning == "Insufficient connector data"
    assert result.enrichment.summary == DEFAULT_SUMMARY
    assert result.enrichment.evidence_links == []
    assert "insufficient_evidence" in result.enrichment.flagged_attributes
    assert "manual_review_required" in result.enrichment.flagged_attributes
    assert NO_EVIDENCE_RISK in result.enrichment.alignment_risks
    assert result.enrichment.identity_confidence <= 25
    assert result.is_failure is False


def test_no_evidence_caps_identity(contact):
    raw = analysis_payload(identityConfidence=95)
    result = normalize_analysis_output(raw, contact)
    assert result.enrichment.identity_confidence == 25


def test_linkedin_only_caps_identity_at_55(contact):
    raw = analysis_payload(identityConfidence=95)
    evidence = [make_evidence("https://linkedin.com/in/jordan"), make_evidence("https://de.linkedin.com/in/jordan")]
    result = normalize_analysis_output(raw, contact, verified_evidence=evidence)
    assert result.enrichment.identity_confidence == 55


def test_numbers_are_clamped_and_rounded(contact):
    raw = analysis_payload()
    raw["scores"]["investorFit"]["score"] = 140
    raw["scores"]["valuesAlignment"]["score"] = -3
    raw["scores"]["govtAccess"]["confidence"] = 55.5
    raw["scores"]["maritimeRelevance"]["score"] = "80"
    raw["scores"]["connectorScore"]["score"] = True
    result = normalize_analysis_output(raw, contact)
    assert result.scores.investor_fit.score == 100
    assert result.scores.values_alignment.score == 0
    assert result.scores.govt_access.confidence == 56
    assert result.scores.maritime_relevance.score == 0
    assert result.scores.connector_score.score == 0


def test_tracks_filtered_and_deduplicated(contact):
    raw = analysis_payload(tracks=["Investment", "Space", "Investment", 7, "Government"])
    result = normalize_analysis_output(raw, contact)
    assert result.enrichment.tracks == [Track.INVESTMENT, Track.GOVERNMENT]


def test_verified_evidence_replaces_model_links(contact):
    raw = analysis_payload(evidenceLinks=[{"claim": "Invented", "url": "https://made-up.example/x"}])
    evidence = [make_evidence("https://linkedin.com/in/jordan"), make_evidence("https://news.example.org/a")]
    result = normalize_analysis_output(raw, contact, verified_evidence=evidence)
    assert [ev.url for ev in result.enrichment.evidence_links] == [
        "https://linkedin.com/in/jordan",
        "https://news.example.org/a",
    ]


def test_missing_linkedin_is_seeded_and_flagged(linkedin_contact):
    evidence = [make_evidence("https://news.example.org/a"), make_evidence("https://b.example.com/b")]
    result = normalize_analysis_output(analysis_payload(), linkedin_contact, verified_evidence=evidence)
    first = result.enrichment.evidence_links[0]
    assert first.url == "https://www.linkedin.com/in/jordan-example"
    assert first.claim == SEED_LINKEDIN_CLAIM
    assert first.confidence == 60
    assert "linkedin_not_verified_by_model" in result.enrichment.flagged_attributes


def test_quality_issues_merge_into_risks(contact):
    evidence = [make_evidence("https://a.example.com"), make_evidence("https://b.example.org")]
    raw = analysis_payload(identityConfidence=40, collisionRisk=True, alignmentRisks=["Prior SPAC involvement"])
    result = normalize_analysis_output(raw, contact, verified_evidence=evidence)
    assert result.enrichment.alignment_risks == [
        "Prior SPAC involvement",
        "Low identity confidence.",
        "Potential identity collision risk.",
    ]
    assert "manual_review_required" in result.enrichment.flagged_attributes


def test_clean_result_has_no_review_flag(contact):
    evidence = [make_evidence("https://a.example.com"), make_evidence("https://b.example.org")]
    result = normalize_analysis_output(analysis_payload(), contact, verified_evidence=evidence)
    assert result.enrichment.flagged_attributes == ["fund_partner"]
    assert result.enrichment.alignment_risks == []
    assert result.enrichment.summary.startswith("Jordan is a maritime")


def test_model_overall_confidence_wins(contact):
    result = normalize_analysis_output(analysis_payload(), contact)
    assert result.scores.overall_confidence == 78


def test_overall_confidence_defaults_to_mean(contact):
    evidence = [make_evidence("https://a.example.com"), make_evidence("https://b.example.org")]
    raw = analysis_payload(identityConfidence=86)
    raw["scores"]["overallConfidence"] = "high"
    result = normalize_analysis_output(raw, contact, verified_evidence=evidence)
    # (80 * 5 + 86) / 6 = 81
    assert result.scores.overall_confidence == 81


def test_snake_case_keys_are_accepted(contact):
    raw = {
        "scores": {"investor_fit": {"score": 50, "confidence": 70, "contributing_factors": ["x"]}},
        "enrichment": {"identity_confidence": 20, "flagged_attributes": ["a"]},
    }
    result = normalize_analysis_output(raw, contact)
    assert result.scores.investor_fit.score == 50
    assert result.scores.investor_fit.contributing_factors == ["x"]
    assert "a" in result.enrichment.flagged_attributes
    assert result.enrichment.identity_confidence == 20


def test_normalization_is_idempotent(linkedin_contact):
    evidence = [make_evidence("https://news.example.org/a")]
    raw = analysis_payload(identityConfidence=90, collisionRisk=True)
    first = normalize_analysis_output(raw, linkedin_contact, verified_evidence=evidence)
    second = normalize_analysis_output(first.to_dict(), linkedin_contact)
    assert second.to_dict() == first.to_dict()


def test_idempotent_on_garbage(contact):
    first = normalize_analysis_output(None, contact)
    second = normalize_analysis_output(first.to_dict(), contact)
    assert second.to_dict() == first.to_dict()
