# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Evidence gate and enrichment quality assessment.

Both are pure functions of their inputs and the thresholds in
AnalysisSettings. The gate runs before analysis to avoid spending model
calls on contacts that cannot be verified; the quality assessment runs on
the normalized result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from bridge_core.config import AnalysisSettings
from bridge_core.schema.enrichment import EnrichmentData
from bridge_core.schema.evidence import Evidence
from bridge_core.utils.url_utils import hostname_for_url, is_linkedin_host

LINKEDIN_ONLY_ISSUE = "Evidence is only from LinkedIn; add at least one non-LinkedIn source."
LOW_IDENTITY_ISSUE = "Low identity confidence."
COLLISION_ISSUE = "Potential identity collision risk."


@dataclass(frozen=True)
class EvidenceGateResult:
    passed: bool
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QualityAssessment:
    requires_review: bool
    issues: list[str] = field(default_factory=list)


def _distinct_hosts(evidence: Sequence[Evidence]) -> list[str]:
    hosts: list[str] = []
    for ev in evidence:
        host = hostname_for_url(ev.url)
        if host and host not in hosts:
            hosts.append(host)
    return hosts


def evaluate_evidence_gate(
    evidence: Sequence[Evidence],
    settings: AnalysisSettings | None = None,
) -> EvidenceGateResult:
    settings = settings or AnalysisSettings()
    issues: list[str] = []
    hosts = _distinct_hosts(evidence)

    if len(evidence) < settings.min_evidence_links:
        issues.append(
            f"Insufficient external evidence (need at least {settings.min_evidence_links} verified links)."
        )

    if evidence and len(hosts) < settings.min_distinct_domains:
        issues.append(
            f"Evidence lacks source diversity (need at least {settings.min_distinct_domains} distinct domains)."
        )

    if evidence and settings.require_non_linkedin_source and all(is_linkedin_host(h) for h in hosts):
        issues.append(LINKEDIN_ONLY_ISSUE)

    return EvidenceGateResult(passed=not issues, issues=issues)


def assess_enrichment_quality(
    enrichment: EnrichmentData,
    settings: AnalysisSettings | None = None,
) -> QualityAssessment:
    settings = settings or AnalysisSettings()
    issues: list[str] = []
    evidence = enrichment.evidence_links
    linkedin_count = sum(1 for ev in evidence if is_linkedin_host(hostname_for_url(ev.url)))

    if len(evidence) < settings.min_evidence_links:
        issues.append(f"Insufficient external evidence (need at least {settings.min_evidence_links} links).")

    if settings.require_non_linkedin_source and evidence and linkedin_count == len(evidence):
        issues.append(LINKEDIN_ONLY_ISSUE)

    if enrichment.identity_confidence < settings.min_identity_confidence:
        issues.append(LOW_IDENTITY_ISSUE)

    if enrichment.collision_risk:
        issues.append(COLLISION_ISSUE)

    return QualityAssessment(requires_review=bool(issues), issues=issues)
