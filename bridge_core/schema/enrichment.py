# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Enrichment output records: per-dimension score provenance, the Scores
bundle, EnrichmentData and the `{scores, enrichment}` result pair.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from bridge_core.schema.evidence import Evidence
from bridge_core.schema.serialization import SchemaModel, utc_now_iso


class Track(str, Enum):
    """Outreach tracks a contact can be routed to."""

    INVESTMENT = "Investment"
    GOVERNMENT = "Government"
    STRATEGIC_PARTNER = "Strategic Partner"


SCORE_DIMENSIONS: tuple[str, ...] = (
    "investor_fit",
    "values_alignment",
    "govt_access",
    "maritime_relevance",
    "connector_score",
)


class ScoreProvenance(SchemaModel):
    score: int = Field(default=0, ge=0, le=100)
    confidence: int = Field(default=0, ge=0, le=100)
    reasoning: str = ""
    contributing_factors: list[str] = Field(default_factory=list)
    missing_data_penalty: bool = True


class Scores(SchemaModel):
    investor_fit: ScoreProvenance
    values_alignment: ScoreProvenance
    govt_access: ScoreProvenance
    maritime_relevance: ScoreProvenance
    connector_score: ScoreProvenance
    overall_confidence: int = Field(default=0, ge=0, le=100)

    def dimensions(self) -> list[ScoreProvenance]:
        return [getattr(self, name) for name in SCORE_DIMENSIONS]

    def mean_confidence(self, identity_confidence: int) -> int:
        """Rounded mean of the five dimension confidences and identity confidence."""
        values = [d.confidence for d in self.dimensions()] + [identity_confidence]
        return int(round(sum(values) / len(values)))


class EnrichmentData(SchemaModel):
    summary: str = ""
    alignment_risks: list[str] = Field(default_factory=list)
    evidence_links: list[Evidence] = Field(default_factory=list)
    recommended_angle: str = ""
    recommended_action: str = ""
    tracks: list[Track] = Field(default_factory=list)
    flagged_attributes: list[str] = Field(default_factory=list)
    identity_confidence: int = Field(default=0, ge=0, le=100)
    collision_risk: bool = False
    last_verified: str = Field(default_factory=utc_now_iso)


class EnrichmentResult(SchemaModel):
    """The `{scores, enrichment}` pair handed back to the host application."""

    scores: Scores
    enrichment: EnrichmentData

    @property
    def is_failure(self) -> bool:
        return "analysis_error" in self.enrichment.flagged_attributes
