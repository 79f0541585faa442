# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Failure Result Builder.

Every pipeline failure resolves to the same EnrichmentResult shape: zeroed
scores, collision risk set, a user-facing summary and remediation per
failure code, and `analysis_error` in flaggedAttributes so callers can
distinguish failures from low-scoring successes.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from bridge_core.llm.failures import FailureCode
from bridge_core.pipeline.errors import ModelAttemptFailure
from bridge_core.schema.enrichment import (
    SCORE_DIMENSIONS,
    EnrichmentData,
    EnrichmentResult,
    ScoreProvenance,
    Scores,
)
from bridge_core.schema.evidence import Evidence

FAILURE_SUMMARIES: dict[FailureCode, str] = {
    FailureCode.SDK_UNAVAILABLE: "Enrichment failed: AI runtime is unavailable in this session.",
    FailureCode.AUTH_REQUIRED: "Enrichment failed: AI authorization is required. Sign in and retry.",
    FailureCode.RATE_LIMITED: "Enrichment failed: AI rate limit reached. Retry in a few minutes.",
    FailureCode.TIMEOUT: "Enrichment failed: AI request timed out before completion.",
    FailureCode.NETWORK: "Enrichment failed: network error while contacting the AI provider.",
    FailureCode.MODEL_UNAVAILABLE: "Enrichment failed: selected AI model is unavailable.",
    FailureCode.ALL_MODELS_FAILED: "Enrichment failed: all configured AI models were unavailable for this request.",
    FailureCode.EVIDENCE_GATE_BLOCKED: "Enrichment blocked: not enough verifiable web evidence was found.",
    FailureCode.UNKNOWN: "Enrichment failed due to an unexpected AI provider error.",
}

FAILURE_ACTIONS: dict[FailureCode, str] = {
    FailureCode.SDK_UNAVAILABLE: "Configure an AI chat capability (e.g. set OPENAI_API_KEY), then retry enrichment.",
    FailureCode.AUTH_REQUIRED: "Check the AI provider credentials, then retry enrichment.",
    FailureCode.RATE_LIMITED: "Wait 2-5 minutes, then retry with a smaller batch.",
    FailureCode.TIMEOUT: "Verify internet connectivity and retry enrichment.",
    FailureCode.NETWORK: "Verify internet connectivity and retry enrichment.",
    FailureCode.MODEL_UNAVAILABLE: "Switch analysis mode in Settings and retry.",
    FailureCode.ALL_MODELS_FAILED: "Switch analysis mode in Settings and retry.",
    FailureCode.EVIDENCE_GATE_BLOCKED: "Re-run enrichment after improving source profile and identifiers.",
    FailureCode.UNKNOWN: "Enable tracing (BRIDGE_TRACE_ENABLED) and retry enrichment to capture error details.",
}

PAUSE_ANGLE = "Pause outreach while enrichment pipeline issues are resolved."
GATE_BLOCKED_ANGLE = "Do not outreach yet; collect additional verification sources."


def failure_summary(code: FailureCode) -> str:
    return FAILURE_SUMMARIES.get(code, FAILURE_SUMMARIES[FailureCode.UNKNOWN])


def failure_action(code: FailureCode) -> str:
    return FAILURE_ACTIONS.get(code, FAILURE_ACTIONS[FailureCode.UNKNOWN])


def _unique(values: Iterable[str]) -> list[str]:
    out: list[str] = []
    for value in values:
        if value and value.strip() and value not in out:
            out.append(value)
    return out


def build_failure_result(
    code: FailureCode,
    *,
    evidence: Sequence[Evidence] | None = None,
    extra_risks: Sequence[str] | None = None,
    attempts: Sequence[ModelAttemptFailure] | None = None,
) -> EnrichmentResult:
    code = FailureCode(code)
    summary = failure_summary(code)
    gate_blocked = code is FailureCode.EVIDENCE_GATE_BLOCKED

    provenance = {
        name: ScoreProvenance(
            score=0,
            confidence=0,
            reasoning=summary,
            contributing_factors=[],
            missing_data_penalty=True,
        )
        for name in SCORE_DIMENSIONS
    }

    flags = ["analysis_error", "manual_review_required", f"error_{code.value}"]
    if gate_blocked:
        flags += ["evidence_gate_blocked", "insufficient_evidence"]

    risks = _unique([
        summary,
        *(extra_risks or []),
        *(a.describe() for a in (attempts or [])),
    ])

    return EnrichmentResult(
        scores=Scores(**provenance, overall_confidence=0),
        enrichment=EnrichmentData(
            summary=summary,
            alignment_risks=risks,
            evidence_links=list(evidence or []),
            recommended_angle=GATE_BLOCKED_ANGLE if gate_blocked else PAUSE_ANGLE,
            recommended_action=failure_action(code),
            tracks=[],
            flagged_attributes=_unique(flags),
            identity_confidence=0,
            collision_risk=True,
        ),
    )
