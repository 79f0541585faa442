# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Output Normalizer.

Turns untrusted model JSON into a validated EnrichmentResult. This is the
single place where defaults are applied; it never raises on malformed input
(None, wrong types and missing keys all produce a fully-defaulted result).

Phase 1 reads the untyped mapping (camelCase or snake_case keys) and
coerces every field; phase 2 applies evidence-driven caps, flags and the
quality assessment to the typed record.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

from bridge_core.config import AnalysisSettings
from bridge_core.schema.contact import Contact
from bridge_core.schema.enrichment import (
    SCORE_DIMENSIONS,
    EnrichmentData,
    EnrichmentResult,
    ScoreProvenance,
    Scores,
    Track,
)
from bridge_core.schema.evidence import Evidence
from bridge_core.schema.serialization import parse_iso, to_iso, utc_now_iso
from bridge_core.utils.url_utils import hostname_for_url, is_linkedin_host
from bridge_core.verification.collector import contact_linkedin_url
from bridge_core.verification.evidence_normalizer import (
    clamp_int,
    has_linkedin_evidence,
    normalize_evidence,
    seed_linkedin_evidence,
)
from bridge_core.verification.gate import assess_enrichment_quality

DEFAULT_SCORE = 0
DEFAULT_CONFIDENCE = 40
DEFAULT_IDENTITY_CONFIDENCE = 30
DEFAULT_EVIDENCE_CONFIDENCE = 50
NO_EVIDENCE_IDENTITY_CAP = 25
LINKEDIN_ONLY_IDENTITY_CAP = 55

NO_EVIDENCE_RISK = "No verifiable evidence links were returned by the model."
SEED_LINKEDIN_CLAIM = "Seed LinkedIn profile imported with contact record."

FALLBACK_REASONING: dict[str, str] = {
    "investor_fit": "Insufficient investor data",
    "values_alignment": "Insufficient values-alignment data",
    "govt_access": "Insufficient government-access data",
    "maritime_relevance": "Insufficient maritime relevance data",
    "connector_score": "Insufficient connector data",
}

DEFAULT_SUMMARY = "Insufficient verified information to produce a reliable enrichment summary."
DEFAULT_ANGLE = "Gather more verified information before outreach."
DEFAULT_ACTION = "Run additional verification and review manually."

_VALID_TRACKS = {t.value: t for t in Track}


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def _obj(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _get(raw: dict[str, Any], name: str) -> Any:
    """Look up a snake_case field under its camelCase key first."""
    camel = _to_camel(name)
    if camel in raw:
        return raw[camel]
    return raw.get(name)


def _string(value: Any, fallback: str = "") -> str:
    return value if isinstance(value, str) else fallback


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _tracks(value: Any) -> list[Track]:
    out: list[Track] = []
    for item in value if isinstance(value, list) else []:
        track = _VALID_TRACKS.get(item.strip()) if isinstance(item, str) else None
        if track is not None and track not in out:
            out.append(track)
    return out


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_score(raw: Any, fallback_reasoning: str) -> ScoreProvenance:
    data = _obj(raw)
    penalty = _get(data, "missing_data_penalty")
    return ScoreProvenance(
        score=clamp_int(data.get("score"), DEFAULT_SCORE),
        confidence=clamp_int(data.get("confidence"), DEFAULT_CONFIDENCE),
        reasoning=_string(data.get("reasoning"), fallback_reasoning),
        contributing_factors=_string_list(_get(data, "contributing_factors")),
        missing_data_penalty=penalty if isinstance(penalty, bool) else True,
    )


def _last_verified(raw: Any) -> str:
    parsed = parse_iso(raw)
    return to_iso(parsed) if parsed is not None else utc_now_iso()


def normalize_analysis_output(
    raw: Any,
    contact: Contact,
    *,
    verified_evidence: Sequence[Evidence] | None = None,
    settings: AnalysisSettings | None = None,
) -> EnrichmentResult:
    """
    Build an EnrichmentResult from untrusted model output.

    Args:
        raw: Parsed model JSON (any shape, including None)
        contact: The contact being enriched (for the LinkedIn seed)
        verified_evidence: When given, replaces the model's evidenceLinks
        settings: Quality thresholds
    """
    settings = settings or AnalysisSettings()
    result = _obj(raw)
    raw_scores = _obj(result.get("scores"))
    raw_enrichment = _obj(result.get("enrichment"))

    dimensions = {
        name: parse_score(_get(raw_scores, name), FALLBACK_REASONING[name])
        for name in SCORE_DIMENSIONS
    }

    if verified_evidence is not None:
        evidence = normalize_evidence(list(verified_evidence), default_confidence=DEFAULT_EVIDENCE_CONFIDENCE)
    else:
        evidence = normalize_evidence(
            _get(raw_enrichment, "evidence_links"), default_confidence=DEFAULT_EVIDENCE_CONFIDENCE
        )

    flagged = _string_list(_get(raw_enrichment, "flagged_attributes"))
    risks = _string_list(_get(raw_enrichment, "alignment_risks"))

    linkedin_url = contact_linkedin_url(contact)
    if linkedin_url and not has_linkedin_evidence(evidence):
        evidence.insert(0, seed_linkedin_evidence(linkedin_url, SEED_LINKEDIN_CLAIM))
        _append_unique(flagged, "linkedin_not_verified_by_model")

    identity = clamp_int(_get(raw_enrichment, "identity_confidence"), DEFAULT_IDENTITY_CONFIDENCE)
    if not evidence:
        _append_unique(flagged, "insufficient_evidence")
        _append_unique(risks, NO_EVIDENCE_RISK)
        identity = min(identity, NO_EVIDENCE_IDENTITY_CAP)
    elif all(is_linkedin_host(hostname_for_url(ev.url)) for ev in evidence):
        identity = min(identity, LINKEDIN_ONLY_IDENTITY_CAP)

    collision = _get(raw_enrichment, "collision_risk")
    enrichment = EnrichmentData(
        summary=_string(raw_enrichment.get("summary"), DEFAULT_SUMMARY),
        alignment_risks=risks,
        evidence_links=evidence,
        recommended_angle=_string(_get(raw_enrichment, "recommended_angle"), DEFAULT_ANGLE),
        recommended_action=_string(_get(raw_enrichment, "recommended_action"), DEFAULT_ACTION),
        tracks=_tracks(raw_enrichment.get("tracks")),
        flagged_attributes=flagged,
        identity_confidence=identity,
        collision_risk=collision if isinstance(collision, bool) else False,
        last_verified=_last_verified(_get(raw_enrichment, "last_verified")),
    )

    quality = assess_enrichment_quality(enrichment, settings)
    if quality.requires_review:
        for issue in quality.issues:
            _append_unique(enrichment.alignment_risks, issue)
        _append_unique(enrichment.flagged_attributes, "manual_review_required")

    overall = _get(raw_scores, "overall_confidence")
    scores = Scores(**dimensions)
    if _is_number(overall):
        scores.overall_confidence = clamp_int(overall, 0)
    else:
        scores.overall_confidence = scores.mean_confidence(identity)
    return EnrichmentResult(scores=scores, enrichment=enrichment)
