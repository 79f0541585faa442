# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Evidence Collector.

Gathers candidate evidence for a contact via a web-search-enabled model
cascade, extracts and normalizes it, seeds the known LinkedIn profile and
hands the candidates to the verifier.

Never raises: unrecoverable failures come back on `EvidenceCollection.failure`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from bridge_core.agents.prompts import build_evidence_prompt
from bridge_core.llm.failures import FailureCode, is_session_level
from bridge_core.llm.fallback import ModelCascade
from bridge_core.llm.model_registry import DEFAULT_MODEL_PRESETS, ModelPresets
from bridge_core.pipeline.errors import PipelineError
from bridge_core.runtime_config import EngineRuntimeConfig
from bridge_core.schema.contact import Contact
from bridge_core.schema.evidence import Evidence
from bridge_core.utils.json_extract import extract_json, extract_json_array, response_to_text, try_parse_json
from bridge_core.utils.trace import Trace
from bridge_core.utils.url_utils import extract_linkedin_url
from bridge_core.verification.evidence_normalizer import (
    evidence_from_urls,
    has_linkedin_evidence,
    normalize_evidence,
    seed_linkedin_evidence,
)
from bridge_core.verification.verifier import EvidenceVerifier

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOLS = [{"type": "web_search"}]
LINKEDIN_SEED_CLAIM = "LinkedIn profile imported from source data."


@dataclass
class EvidenceCollection:
    verified_evidence: list[Evidence] = field(default_factory=list)
    candidate_count: int = 0
    failure: PipelineError | None = None


def contact_linkedin_url(contact: Contact) -> str | None:
    return extract_linkedin_url(contact.source, contact.raw_text, contact.headline)


def extract_evidence_candidates(text: str, *, contact_name: str, url_scan_limit: int = 6) -> list[Evidence]:
    """
    Candidates from a search response, first non-empty of:
    a JSON array, an object's `evidenceLinks`, a bare URL scan.
    """
    parsed = try_parse_json(extract_json_array(text))
    candidates = normalize_evidence(parsed) if isinstance(parsed, list) else []
    if candidates:
        return candidates

    parsed = try_parse_json(extract_json(text))
    if isinstance(parsed, dict):
        candidates = normalize_evidence(parsed.get("evidenceLinks") or parsed.get("evidence_links") or [])
    if candidates:
        return candidates

    return evidence_from_urls(text, contact_name=contact_name, limit=url_scan_limit)


class EvidenceCollector:
    def __init__(
        self,
        cascade: ModelCascade,
        verifier: EvidenceVerifier,
        *,
        presets: ModelPresets = DEFAULT_MODEL_PRESETS,
        runtime: EngineRuntimeConfig | None = None,
    ):
        self.cascade = cascade
        self.verifier = verifier
        self.presets = presets
        self.runtime = runtime or EngineRuntimeConfig.default()

    async def _search(self, prompt: str, contact: Contact) -> Any:
        models = self.presets.evidence_models()
        try:
            return await self.cascade.invoke(
                prompt, models, {"tools": WEB_SEARCH_TOOLS}, context_label="evidence-search"
            )
        except PipelineError as e:
            if is_session_level(e.code):
                raise
            logger.warning(
                "[Evidence] Tool-enabled web search failed for %s (code=%s); falling back to plain retrieval",
                contact.id, e.code.value,
            )
            Trace.event("evidence.search.fallback", {"contact_id": contact.id, **e.to_trace_dict()})
        return await self.cascade.invoke(prompt, models, {}, context_label="evidence-search-fallback")

    async def gather(self, contact: Contact) -> EvidenceCollection:
        linkedin_url = contact_linkedin_url(contact)
        try:
            if not self.cascade.available:
                raise PipelineError(
                    "AI chat capability unavailable during evidence gathering.",
                    FailureCode.SDK_UNAVAILABLE,
                    "evidence-search",
                )

            logger.info("[Evidence] Gathering evidence for %s", contact.id)
            Trace.event("evidence.gather.start", {"contact_id": contact.id, "has_linkedin": bool(linkedin_url)})

            response = await self._search(build_evidence_prompt(contact, linkedin_url), contact)
            text = response_to_text(response)
            candidates = extract_evidence_candidates(
                text,
                contact_name=contact.name,
                url_scan_limit=self.runtime.verification.max_url_scan_results,
            )

            if linkedin_url and not has_linkedin_evidence(candidates):
                candidates.insert(0, seed_linkedin_evidence(linkedin_url, LINKEDIN_SEED_CLAIM))

            verified = await self.verifier.verify(candidates)
            logger.info(
                "[Evidence] %s: %d candidates, %d verified",
                contact.id, len(candidates), len(verified),
            )
            Trace.event("evidence.gather.done", {
                "contact_id": contact.id,
                "candidate_count": len(candidates),
                "verified_count": len(verified),
            })
            return EvidenceCollection(verified_evidence=verified, candidate_count=len(candidates))
        except Exception as exc:
            failure = PipelineError.from_exception(exc, "evidence-search")
            logger.error(
                "[Evidence] Evidence gathering failed for %s (code=%s): %s",
                contact.id, failure.code.value, failure.message,
            )
            Trace.event("evidence.gather.failed", {"contact_id": contact.id, **failure.to_trace_dict()})
            return EvidenceCollection(failure=failure)
