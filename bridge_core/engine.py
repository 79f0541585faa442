# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# Bridge Engine - main entry point

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Iterable
from uuid import uuid4

from bridge_core import PROMPT_VERSION
from bridge_core.config import BridgeConfig
from bridge_core.knowledge import KnowledgeContextProvider
from bridge_core.llm.chat import ChatCapability, OpenAIChatCapability
from bridge_core.llm.model_registry import DEFAULT_MODEL_PRESETS, ModelPresets
from bridge_core.pipeline.batch import ResultCallback, enrich_batch
from bridge_core.pipeline.controller import EnrichmentPipeline
from bridge_core.schema.contact import Contact
from bridge_core.schema.enrichment import EnrichmentResult
from bridge_core.tools.fetch import FetchCapability, HttpxFetchCapability
from bridge_core.utils.trace import Trace

logger = logging.getLogger(__name__)


def _new_trace_id(prefix: str) -> str:
    return f"{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}_{prefix}_{str(uuid4())[:6]}"


class BridgeEngine:
    """
    The main entry point for the Bridge enrichment engine.

    Without explicit capabilities the engine builds the default OpenAI chat
    adapter (when an API key is configured) and the httpx fetch adapter.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        chat: ChatCapability | None = None,
        fetch: FetchCapability | None = None,
        knowledge: KnowledgeContextProvider | None = None,
        presets: ModelPresets = DEFAULT_MODEL_PRESETS,
    ):
        self.config = config
        self._owned: list[Any] = []

        if chat is None and config.openai_api_key:
            chat = OpenAIChatCapability(
                api_key=config.openai_api_key,
                default_model=config.openai_model,
                timeout_sec=config.runtime.llm.timeout_sec,
                max_retries=config.runtime.llm.max_retries,
            )
            self._owned.append(chat)
        if fetch is None:
            fetch = HttpxFetchCapability(timeout_s=config.runtime.verification.get_timeout_sec)
            self._owned.append(fetch)

        self.pipeline = EnrichmentPipeline(
            chat,
            fetch,
            knowledge=knowledge,
            settings=config.analysis,
            presets=presets,
            runtime=config.runtime,
        )
        try:
            logger.debug("Effective config: %s", json.dumps(config.runtime.to_safe_log_dict(), ensure_ascii=False))
        except (TypeError, ValueError):
            pass

    async def enrich_contact(self, contact: Contact | dict[str, Any]) -> EnrichmentResult:
        if not isinstance(contact, Contact):
            contact = Contact.from_dict(contact)
        Trace.start(_new_trace_id(contact.id or "contact"), runtime=self.config.runtime)
        try:
            Trace.event("engine.enrich_contact.start", {
                "contact_id": contact.id,
                "focus_mode": self.config.analysis.focus_mode.value,
                "analysis_model": self.config.analysis.analysis_model.value,
                "prompt_version": PROMPT_VERSION,
            })
            result = await self.pipeline.enrich(contact)
            Trace.event("engine.enrich_contact.done", {
                "contact_id": contact.id,
                "is_failure": result.is_failure,
                "flags": result.enrichment.flagged_attributes,
            })
            return result
        finally:
            Trace.stop()

    async def enrich_contacts(
        self,
        contacts: Iterable[Contact | dict[str, Any]],
        *,
        should_cancel=None,
        on_result: ResultCallback | None = None,
    ) -> dict[str, EnrichmentResult]:
        parsed = [c if isinstance(c, Contact) else Contact.from_dict(c) for c in contacts]
        Trace.start(_new_trace_id("batch"), runtime=self.config.runtime)
        try:
            return await enrich_batch(
                self.pipeline,
                parsed,
                batch_size=self.config.runtime.batch.batch_size,
                delay_sec=self.config.runtime.batch.delay_sec,
                should_cancel=should_cancel,
                on_result=on_result,
            )
        finally:
            Trace.stop()

    async def close(self) -> None:
        for capability in self._owned:
            await capability.close()
        self._owned = []
