# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Pipeline Controller.

    GATHERING_EVIDENCE -> GATE_CHECK -> ANALYZING -> NORMALIZING -> DONE

Any stage before NORMALIZING may exit to FAILED. Linear, no revisits. `enrich` always returns an EnrichmentResult: every
error is classified and routed through the failure result builder.
"""

from __future__ import annotations

import logging
from typing import Any

from bridge_core.agents.prompts import build_analysis_prompt, build_json_repair_prompt
from bridge_core.config import AnalysisSettings
from bridge_core.knowledge import KnowledgeContextProvider, StaticKnowledgeContext
from bridge_core.llm.chat import ChatCapability
from bridge_core.llm.failures import FailureCode
from bridge_core.llm.fallback import ModelCascade
from bridge_core.llm.model_registry import DEFAULT_MODEL_PRESETS, ModelPresets
from bridge_core.pipeline.errors import PipelineError
from bridge_core.pipeline.states import EnrichmentRun, PipelineState
from bridge_core.runtime_config import EngineRuntimeConfig
from bridge_core.schema.contact import Contact
from bridge_core.schema.enrichment import EnrichmentResult
from bridge_core.schema.evidence import Evidence
from bridge_core.scoring.failure_result import build_failure_result
from bridge_core.scoring.normalize import normalize_analysis_output
from bridge_core.tools.fetch import FetchCapability
from bridge_core.utils.json_extract import extract_json, response_to_text, try_parse_json
from bridge_core.utils.trace import Trace
from bridge_core.verification.collector import EvidenceCollector, contact_linkedin_url
from bridge_core.verification.gate import evaluate_evidence_gate
from bridge_core.verification.verifier import EvidenceVerifier

logger = logging.getLogger(__name__)


class EnrichmentPipeline:
    """
    Enriches one contact per call.

    Capabilities are injected; `chat=None` fails fast with sdk_unavailable and
    `fetch=None` skips reachability checks. Instances hold no per-contact
    state, so concurrent calls for different contacts are safe.
    """

    def __init__(
        self,
        chat: ChatCapability | None,
        fetch: FetchCapability | None = None,
        *,
        knowledge: KnowledgeContextProvider | None = None,
        settings: AnalysisSettings | None = None,
        presets: ModelPresets = DEFAULT_MODEL_PRESETS,
        runtime: EngineRuntimeConfig | None = None,
    ):
        self.settings = settings or AnalysisSettings()
        self.presets = presets
        self.runtime = runtime or EngineRuntimeConfig.default()
        self.knowledge = knowledge or StaticKnowledgeContext()
        self.cascade = ModelCascade(chat)
        self.verifier = EvidenceVerifier(
            fetch,
            config=self.runtime.verification,
            max_candidates=self.settings.max_evidence_links,
        )
        self.collector = EvidenceCollector(
            self.cascade,
            self.verifier,
            presets=self.presets,
            runtime=self.runtime,
        )

    async def enrich(self, contact: Contact) -> EnrichmentResult:
        result, _ = await self.enrich_with_run(contact)
        return result

    def _enter(self, run: EnrichmentRun, state: PipelineState) -> None:
        run.enter(state)
        logger.debug("[Pipeline] %s -> %s", run.contact_id, state.value)
        Trace.event("pipeline.state", {"contact_id": run.contact_id, "state": state.value})

    def _fail(self, run: EnrichmentRun, code: FailureCode) -> None:
        if run.is_terminal:
            return
        run.fail(code)
        Trace.event("pipeline.state", {
            "contact_id": run.contact_id,
            "state": PipelineState.FAILED.value,
            "code": code.value,
        })

    async def enrich_with_run(self, contact: Contact) -> tuple[EnrichmentResult, EnrichmentRun]:
        """Like `enrich`, also returning the recorded state transitions."""
        run = EnrichmentRun(contact_id=contact.id)
        evidence: list[Evidence] = []

        if not self.cascade.available:
            logger.error("[Pipeline] No AI chat capability; cannot enrich %s", contact.id)
            self._fail(run, FailureCode.SDK_UNAVAILABLE)
            return build_failure_result(
                FailureCode.SDK_UNAVAILABLE,
                extra_risks=["Evidence stage failure: AI chat capability unavailable."],
            ), run

        try:
            self._enter(run, PipelineState.GATHERING_EVIDENCE)
            collection = await self.collector.gather(contact)
            evidence = collection.verified_evidence

            if collection.failure is not None:
                failure = collection.failure
                if not evidence:
                    self._fail(run, failure.code)
                    return build_failure_result(
                        failure.code,
                        extra_risks=[f"Evidence stage failure: {failure.message}"],
                        attempts=failure.attempts,
                    ), run
                logger.warning(
                    "[Pipeline] Evidence stage partially failed for %s (code=%s); continuing with %d items",
                    contact.id, failure.code.value, len(evidence),
                )

            self._enter(run, PipelineState.GATE_CHECK)
            gate = evaluate_evidence_gate(evidence, self.settings)
            Trace.event("gate.result", {
                "contact_id": contact.id,
                "passed": gate.passed,
                "issues": gate.issues,
                "evidence_count": len(evidence),
            })
            if not gate.passed:
                logger.warning("[Pipeline] Evidence gate blocked %s: %s", contact.id, "; ".join(gate.issues))
                self._fail(run, FailureCode.EVIDENCE_GATE_BLOCKED)
                return build_failure_result(
                    FailureCode.EVIDENCE_GATE_BLOCKED,
                    evidence=evidence,
                    extra_risks=gate.issues,
                ), run

            self._enter(run, PipelineState.ANALYZING)
            parsed = await self._analyze(contact, evidence)

            self._enter(run, PipelineState.NORMALIZING)
            result = normalize_analysis_output(
                parsed,
                contact,
                verified_evidence=evidence,
                settings=self.settings,
            )
            self._enter(run, PipelineState.DONE)
            logger.info(
                "[Pipeline] Enriched %s (overall=%d, identity=%d)",
                contact.id, result.scores.overall_confidence, result.enrichment.identity_confidence,
            )
            return result, run
        except Exception as exc:
            in_evidence_stage = run.state in (None, PipelineState.GATHERING_EVIDENCE)
            label = "evidence-search" if in_evidence_stage else "contact-analysis"
            err = PipelineError.from_exception(exc, label)
            stage = "Evidence" if in_evidence_stage else "Analysis"
            logger.error(
                "[Pipeline] %s stage failed for %s (code=%s): %s",
                stage, contact.id, err.code.value, err.message,
            )
            Trace.event("analysis.failed", {"contact_id": contact.id, **err.to_trace_dict()})
            self._fail(run, err.code)
            return build_failure_result(
                err.code,
                evidence=evidence,
                extra_risks=[f"{stage} stage failure: {err.message}"],
                attempts=err.attempts,
            ), run

    async def _analyze(self, contact: Contact, evidence: list[Evidence]) -> Any:
        """Run the analysis cascade; returns parsed JSON or None when unparseable."""
        models = self.presets.analysis_models(self.settings.analysis_model)
        prompt = build_analysis_prompt(
            contact,
            thesis_context=self.knowledge.get_thesis_context(),
            focus_mode=self.settings.focus_mode,
            linkedin_url=contact_linkedin_url(contact),
            verified_evidence=evidence,
        )
        Trace.event("analysis.start", {
            "contact_id": contact.id,
            "models": models,
            "evidence_count": len(evidence),
            "prompt_chars": len(prompt),
        })
        response = await self.cascade.invoke(prompt, models, {}, context_label="contact-analysis")
        text = response_to_text(response)

        parsed = try_parse_json(extract_json(text))
        if parsed is not None:
            return parsed

        logger.warning("[Pipeline] Malformed analysis JSON for %s; running repair pass", contact.id)
        Trace.event("analysis.malformed_json", {"contact_id": contact.id, "chars": len(text)})
        if not self.runtime.features.json_repair:
            return None
        return await self._repair(text, models)

    async def _repair(self, text: str, models: list[str]) -> Any:
        try:
            response = await self.cascade.invoke(
                build_json_repair_prompt(text), models, {}, context_label="json-repair"
            )
        except PipelineError as e:
            logger.warning("[Pipeline] JSON repair failed (code=%s); defaulting output", e.code.value)
            Trace.event("analysis.repair.failed", e.to_trace_dict())
            return None
        repaired = try_parse_json(extract_json(response_to_text(response)))
        Trace.event("analysis.repair.done", {"parsed": repaired is not None})
        return repaired
