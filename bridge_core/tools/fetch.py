# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Network-fetch capability used for evidence reachability checks.

Optional: hosts that cannot perform outbound requests pass None and
verification degrades to pass-through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx


@dataclass(frozen=True)
class FetchResponse:
    ok: bool
    status: int

    @property
    def reachable(self) -> bool:
        """2xx or 3xx."""
        return self.ok or 200 <= self.status < 400


@runtime_checkable
class FetchCapability(Protocol):
    async def fetch(self, url: str, *, method: str = "GET") -> FetchResponse:
        ...


class HttpxFetchCapability:
    """Default fetch capability over a shared httpx.AsyncClient."""

    def __init__(self, *, timeout_s: float = 10.0, client: httpx.AsyncClient | None = None):
        self._client = client or httpx.AsyncClient(
            timeout=float(timeout_s),
            follow_redirects=True,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            headers={"User-Agent": "bridge-engine/0.1 (+evidence-verification)"},
        )

    async def fetch(self, url: str, *, method: str = "GET") -> FetchResponse:
        r = await self._client.request(method.upper(), url)
        return FetchResponse(ok=r.is_success, status=r.status_code)

    async def close(self) -> None:
        await self._client.aclose()
