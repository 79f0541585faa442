# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Evidence reachability verification.

Best-effort, not mandatory: some runtimes cannot perform outbound fetches,
and a transient network blip must not starve the pipeline of evidence.
"""

from __future__ import annotations

import asyncio
import logging

from bridge_core.runtime_config import EngineVerificationConfig
from bridge_core.schema.evidence import Evidence
from bridge_core.tools.fetch import FetchCapability
from bridge_core.utils.trace import Trace

logger = logging.getLogger(__name__)


class EvidenceVerifier:
    def __init__(
        self,
        fetch: FetchCapability | None,
        *,
        config: EngineVerificationConfig | None = None,
        max_candidates: int = 8,
    ):
        self.fetch = fetch
        self.config = config or EngineVerificationConfig()
        self.max_candidates = max(1, int(max_candidates))

    @property
    def available(self) -> bool:
        return self.fetch is not None and callable(getattr(self.fetch, "fetch", None))

    async def _probe(self, url: str, method: str, timeout: float) -> bool:
        try:
            response = await asyncio.wait_for(self.fetch.fetch(url, method=method), timeout=timeout)  # type: ignore[union-attr]
        except asyncio.TimeoutError:
            logger.debug("[Verifier] %s %s timed out after %.1fs", method, url, timeout)
            return False
        except Exception as e:
            logger.debug("[Verifier] %s %s failed: %s", method, url, e)
            return False
        ok = bool(getattr(response, "ok", False))
        status = int(getattr(response, "status", 0) or 0)
        return ok or 200 <= status < 400

    async def is_reachable(self, url: str) -> bool:
        """HEAD first, then GET; reachable on any 2xx/3xx."""
        if not self.available:
            return False
        if await self._probe(url, "HEAD", self.config.head_timeout_sec):
            return True
        return await self._probe(url, "GET", self.config.get_timeout_sec)

    async def verify(self, evidence: list[Evidence]) -> list[Evidence]:
        """
        Keep reachable candidates among the first `max_candidates`.

        Without a fetch capability the capped candidates pass through
        unchanged; if nothing is reachable the capped unverified set is
        returned instead of an empty list.
        """
        capped = list(evidence[: self.max_candidates])
        if not capped:
            return []

        if not self.available:
            Trace.event("evidence.verify.skipped", {"reason": "fetch_unavailable", "count": len(capped)})
            return capped

        checks = await asyncio.gather(*(self.is_reachable(ev.url) for ev in capped))
        verified = [ev for ev, ok in zip(capped, checks) if ok]

        Trace.event("evidence.verify.done", {
            "candidates": len(capped),
            "verified": len(verified),
            "unreachable": [ev.url for ev, ok in zip(capped, checks) if not ok],
        })
        if not verified:
            logger.warning(
                "[Verifier] No candidate URL was reachable; keeping %d unverified candidates",
                len(capped),
            )
            return capped
        return verified
