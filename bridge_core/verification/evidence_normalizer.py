# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Turns raw claim/URL entries into validated, deduplicated Evidence."""

from __future__ import annotations

import math
from typing import Any, Iterable

from bridge_core.schema.evidence import Evidence
from bridge_core.schema.serialization import normalize_timestamp, utc_now_iso
from bridge_core.utils.url_utils import clean_url, extract_http_urls, is_http_url, is_linkedin_url

SEED_LINKEDIN_CONFIDENCE = 60
URL_SCAN_CONFIDENCE = 55


def clamp_int(value: Any, fallback: int, min_v: int = 0, max_v: int = 100) -> int:
    """Clamp a finite, non-bool number into [min_v, max_v]; anything else uses fallback."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        value = fallback
    return int(max(min_v, min(max_v, round(value))))


def _as_dict(entry: Any) -> dict[str, Any]:
    if isinstance(entry, Evidence):
        return entry.model_dump()
    return entry if isinstance(entry, dict) else {}


def normalize_evidence(raw_entries: Any, *, default_confidence: int = 60) -> list[Evidence]:
    """
    Validate raw evidence entries.

    Drops entries without a claim or whose URL is not http(s) after trailing
    punctuation cleanup, keeps the first of each `(claim, url)` pair, clamps
    confidence and re-emits timestamps (malformed → now).
    """
    if not isinstance(raw_entries, (list, tuple)):
        return []

    seen: set[tuple[str, str]] = set()
    out: list[Evidence] = []
    for entry in raw_entries:
        data = _as_dict(entry)
        claim = data.get("claim")
        claim = claim.strip() if isinstance(claim, str) else ""
        url = data.get("url")
        url = clean_url(url) if isinstance(url, str) else ""
        if not claim or not is_http_url(url):
            continue
        ev = Evidence(
            claim=claim,
            url=url,
            timestamp=normalize_timestamp(data.get("timestamp")),
            confidence=clamp_int(data.get("confidence"), default_confidence),
        )
        if ev.dedupe_key in seen:
            continue
        seen.add(ev.dedupe_key)
        out.append(ev)
    return out


def evidence_from_urls(text: str, *, contact_name: str, limit: int = 6) -> list[Evidence]:
    """Placeholder-claim evidence for bare URLs when a response ignored the schema."""
    now = utc_now_iso()
    return [
        Evidence(
            claim=f"Source discovered during web due diligence for {contact_name}.",
            url=url,
            timestamp=now,
            confidence=URL_SCAN_CONFIDENCE,
        )
        for url in extract_http_urls(text)[:limit]
    ]


def has_linkedin_evidence(evidence: Iterable[Evidence]) -> bool:
    return any(is_linkedin_url(ev.url) for ev in evidence)


def seed_linkedin_evidence(url: str, claim: str) -> Evidence:
    return Evidence(
        claim=claim,
        url=url,
        timestamp=utc_now_iso(),
        confidence=SEED_LINKEDIN_CONFIDENCE,
    )
