# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Knowledge context injected into the analysis prompt.

The pipeline only needs `get_thesis_context()`. `ThesisMemory` is an
in-process store of thesis ("hard rules") and context ("current
priorities") chunks; persistence belongs to the host application.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

from bridge_core.schema.serialization import utc_now_iso

logger = logging.getLogger(__name__)

ChunkTag = Literal["thesis", "context"]

DEFAULT_THESIS_CONTEXT = (
    "No specific thesis documents loaded. Proceed with general best practices for "
    "Values-Aligned Capital (Patient, Strategic, Non-Predatory)."
)

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_MIN_CHUNK_CHARS = 10


@runtime_checkable
class KnowledgeContextProvider(Protocol):
    def get_thesis_context(self) -> str:
        ...


@dataclass
class ThesisChunk:
    content: str
    source: str
    tags: list[str]
    id: str = field(default_factory=lambda: f"chunk-{uuid.uuid4().hex[:12]}")
    version: str = field(default_factory=utc_now_iso)


class StaticKnowledgeContext:
    """Fixed context text; blank text renders the default guidance."""

    def __init__(self, text: str = ""):
        self.text = text

    def get_thesis_context(self) -> str:
        return self.text.strip() or DEFAULT_THESIS_CONTEXT


class ThesisMemory:
    def __init__(self, chunks: list[ThesisChunk] | None = None):
        self._chunks: list[ThesisChunk] = list(chunks or [])

    @staticmethod
    def chunk_text(text: str, source: str, tag: ChunkTag) -> list[ThesisChunk]:
        """Split on blank lines; fragments of 10 characters or fewer are dropped."""
        return [
            ThesisChunk(content=part.strip(), source=source, tags=[tag])
            for part in _PARAGRAPH_SPLIT_RE.split(text or "")
            if len(part.strip()) > _MIN_CHUNK_CHARS
        ]

    def ingest(self, text: str, source: str, tag: ChunkTag) -> list[ThesisChunk]:
        new_chunks = self.chunk_text(text, source, tag)
        self._chunks.extend(new_chunks)
        logger.debug("[Knowledge] Ingested %d %s chunks from %s", len(new_chunks), tag, source)
        return new_chunks

    def replace_source(self, text: str, source: str, tag: ChunkTag) -> list[ThesisChunk]:
        """Drop previous chunks of (source, tag) and ingest `text` in their place."""
        self._chunks = [c for c in self._chunks if not (c.source == source and tag in c.tags)]
        if not (text or "").strip():
            return []
        return self.ingest(text, source, tag)

    def by_tag(self, tag: ChunkTag) -> list[ThesisChunk]:
        return [c for c in self._chunks if tag in c.tags]

    def clear(self) -> None:
        self._chunks = []

    def stats(self) -> dict[str, int]:
        return {
            "total_chunks": len(self._chunks),
            "thesis_chunks": len(self.by_tag("thesis")),
            "context_chunks": len(self.by_tag("context")),
            "sources": len({c.source for c in self._chunks}),
        }

    def get_thesis_context(self) -> str:
        thesis = self.by_tag("thesis")
        context = self.by_tag("context")
        if not thesis and not context:
            return DEFAULT_THESIS_CONTEXT

        out = ""
        if thesis:
            out += "=== SECTION 1: LEVIATHAN CONSTITUTION (HARD RULES) ===\n"
            out += "These are immutable constraints. Any contact violating these must be flagged.\n\n"
            out += "\n\n".join(
                f"RULE #{i} ({c.source}):\n{c.content}" for i, c in enumerate(thesis, start=1)
            )
            out += "\n\n"
        if context:
            out += "=== SECTION 2: STRATEGIC CONTEXT (CURRENT PRIORITIES) ===\n"
            out += (
                "These are current focus areas and strategic desires. "
                "Use these for scoring Investor Fit and Alignment.\n\n"
            )
            out += "\n\n".join(
                f"CONTEXT #{i} ({c.source}):\n{c.content}" for i, c in enumerate(context, start=1)
            )
        return out
