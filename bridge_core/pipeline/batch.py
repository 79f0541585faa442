# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Batch enrichment.

Contacts are enriched one at a time with a fixed delay between them to stay
under provider rate limits. Cancellation is checked only between whole
contacts; an in-flight enrichment always runs to completion.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Container, Iterable

from bridge_core.schema.contact import Contact
from bridge_core.schema.enrichment import EnrichmentResult

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Contact, EnrichmentResult], Awaitable[None] | None]


def result_key(contact: Contact, position: int, taken: Container[str]) -> str:
    """
    Key for a batch result: the contact id, or `#<position>` when the id is
    blank or already used earlier in the batch.
    """
    key = contact.id.strip()
    if not key:
        return f"#{position}"
    if key in taken:
        return f"{key}#{position}"
    return key


async def enrich_batch(
    pipeline,
    contacts: Iterable[Contact],
    *,
    batch_size: int = 3,
    delay_sec: float = 1.0,
    should_cancel: Callable[[], bool] | None = None,
    on_result: ResultCallback | None = None,
) -> dict[str, EnrichmentResult]:
    """
    Enrich `contacts` sequentially in batches of `batch_size`.

    Returns:
        One result per processed contact, in processing order, keyed by
        `result_key`. Contacts skipped by cancellation are absent.
    """
    pending = list(contacts)
    batch_size = max(1, int(batch_size))
    delay_sec = max(0.0, float(delay_sec))
    results: dict[str, EnrichmentResult] = {}

    for start in range(0, len(pending), batch_size):
        batch = pending[start:start + batch_size]
        logger.info(
            "[Batch] Processing contacts %d-%d of %d",
            start + 1, start + len(batch), len(pending),
        )
        for position, contact in enumerate(batch, start=start):
            if should_cancel is not None and should_cancel():
                logger.info("[Batch] Cancelled after %d of %d contacts", position, len(pending))
                return results

            result = await pipeline.enrich(contact)
            key = result_key(contact, position, results)
            if key != contact.id:
                logger.warning("[Batch] Contact id %r is blank or repeated; storing result as %s", contact.id, key)
            results[key] = result
            if on_result is not None:
                maybe = on_result(contact, result)
                if asyncio.iscoroutine(maybe):
                    await maybe

            if position < len(pending) - 1 and delay_sec > 0:
                await asyncio.sleep(delay_sec)

    return results
