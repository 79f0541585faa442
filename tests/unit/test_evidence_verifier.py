# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from bridge_core.runtime_config import EngineVerificationConfig
from bridge_core.tools.fetch import FetchResponse
from bridge_core.verification.verifier import EvidenceVerifier
from tests.fixtures.enrichment_fixtures import make_evidence


def _fetch(handler):
    fetch = MagicMock()
    fetch.fetch = AsyncMock(side_effect=handler)
    return fetch


@pytest.mark.asyncio
async def test_head_success_skips_get():
    fetch = _fetch(lambda url, method="GET": FetchResponse(ok=True, status=200))
    verifier = EvidenceVerifier(fetch)

    assert await verifier.is_reachable("https://example.com") is True
    fetch.fetch.assert_awaited_once_with("https://example.com", method="HEAD")


@pytest.mark.asyncio
async def test_head_failure_falls_back_to_get():
    def handler(url, method="GET"):
        if method == "HEAD":
            return FetchResponse(ok=False, status=405)
        return FetchResponse(ok=False, status=301)

    fetch = _fetch(handler)
    verifier = EvidenceVerifier(fetch)

    assert await verifier.is_reachable("https://example.com") is True
    assert [c.kwargs["method"] for c in fetch.fetch.call_args_list] == ["HEAD", "GET"]


@pytest.mark.asyncio
async def test_exceptions_count_as_unreachable():
    def handler(url, method="GET"):
        raise ConnectionError("refused")

    verifier = EvidenceVerifier(_fetch(handler))
    assert await verifier.is_reachable("https://example.com") is False


@pytest.mark.asyncio
async def test_timeout_counts_as_unreachable():
    async def slow(url, method="GET"):
        await asyncio.sleep(1)
        return FetchResponse(ok=True, status=200)

    fetch = MagicMock()
    fetch.fetch = slow
    config = EngineVerificationConfig(head_timeout_sec=0.01, get_timeout_sec=0.01)
    verifier = EvidenceVerifier(fetch, config=config)

    assert await verifier.is_reachable("https://example.com") is False


@pytest.mark.asyncio
async def test_verify_keeps_only_reachable():
    def handler(url, method="GET"):
        return FetchResponse(ok="dead" not in url, status=404 if "dead" in url else 200)

    verifier = EvidenceVerifier(_fetch(handler))
    evidence = [make_evidence("https://a.com/ok"), make_evidence("https://b.com/dead"), make_evidence("https://c.com/ok")]

    out = await verifier.verify(evidence)
    assert [ev.url for ev in out] == ["https://a.com/ok", "https://c.com/ok"]


@pytest.mark.asyncio
async def test_verify_caps_candidates():
    fetch = _fetch(lambda url, method="GET": FetchResponse(ok=True, status=200))
    verifier = EvidenceVerifier(fetch, max_candidates=8)
    evidence = [make_evidence(f"https://site{i}.com") for i in range(12)]

    out = await verifier.verify(evidence)
    assert len(out) == 8
    assert fetch.fetch.await_count == 8


@pytest.mark.asyncio
async def test_zero_survivors_falls_back_to_capped_candidates():
    fetch = _fetch(lambda url, method="GET": FetchResponse(ok=False, status=500))
    verifier = EvidenceVerifier(fetch, max_candidates=2)
    evidence = [make_evidence(f"https://site{i}.com") for i in range(3)]

    out = await verifier.verify(evidence)
    assert [ev.url for ev in out] == ["https://site0.com", "https://site1.com"]


@pytest.mark.asyncio
async def test_missing_fetch_passes_through():
    verifier = EvidenceVerifier(None, max_candidates=2)
    evidence = [make_evidence(f"https://site{i}.com") for i in range(3)]

    assert verifier.available is False
    out = await verifier.verify(evidence)
    assert len(out) == 2
    assert await verifier.is_reachable("https://site0.com") is False
