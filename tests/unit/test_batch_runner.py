# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from bridge_core.llm.failures import FailureCode
from bridge_core.pipeline.batch import enrich_batch, result_key
from bridge_core.schema.contact import Contact
from bridge_core.scoring.failure_result import build_failure_result


def _contacts(n):
    return [Contact(id=f"c-{i}", name=f"Person {i}") for i in range(n)]


def _pipeline():
    pipeline = MagicMock()
    pipeline.enrich = AsyncMock(side_effect=lambda contact: build_failure_result(FailureCode.TIMEOUT))
    return pipeline


@pytest.mark.asyncio
async def test_processes_all_in_order_with_delays_between():
    pipeline = _pipeline()
    with patch("bridge_core.pipeline.batch.asyncio.sleep", new=AsyncMock()) as sleep:
        results = await enrich_batch(pipeline, _contacts(4), batch_size=3, delay_sec=0.5)

    assert list(results) == ["c-0", "c-1", "c-2", "c-3"]
    assert [c.args[0].id for c in pipeline.enrich.call_args_list] == ["c-0", "c-1", "c-2", "c-3"]
    # No delay after the last contact.
    assert sleep.await_count == 3
    sleep.assert_awaited_with(0.5)


@pytest.mark.asyncio
async def test_cancellation_checked_between_contacts():
    pipeline = _pipeline()
    seen = []

    def should_cancel():
        return len(seen) >= 2

    def on_result(contact, result):
        seen.append(contact.id)

    with patch("bridge_core.pipeline.batch.asyncio.sleep", new=AsyncMock()):
        results = await enrich_batch(
            pipeline, _contacts(5), should_cancel=should_cancel, on_result=on_result
        )

    assert list(results) == ["c-0", "c-1"]
    assert seen == ["c-0", "c-1"]
    assert pipeline.enrich.await_count == 2


@pytest.mark.asyncio
async def test_async_on_result_is_awaited():
    pipeline = _pipeline()
    on_result = AsyncMock()

    results = await enrich_batch(pipeline, _contacts(2), delay_sec=0, on_result=on_result)

    assert len(results) == 2
    assert on_result.await_count == 2


@pytest.mark.asyncio
async def test_empty_input():
    pipeline = _pipeline()
    assert await enrich_batch(pipeline, []) == {}
    pipeline.enrich.assert_not_awaited()


@pytest.mark.asyncio
async def test_blank_and_repeated_ids_keep_every_result():
    pipeline = _pipeline()
    contacts = [
        Contact(name="No id one"),
        Contact(name="No id two"),
        Contact(id="dup", name="First"),
        Contact(id="dup", name="Second"),
    ]
    with patch("bridge_core.pipeline.batch.asyncio.sleep", new=AsyncMock()) as sleep:
        results = await enrich_batch(pipeline, contacts, batch_size=3, delay_sec=1.0)

    assert list(results) == ["#0", "#1", "dup", "dup#3"]
    assert pipeline.enrich.await_count == 4
    assert sleep.await_count == 3


def test_result_key():
    assert result_key(Contact(id="c-9"), 4, {}) == "c-9"
    assert result_key(Contact(id="  "), 4, {}) == "#4"
    assert result_key(Contact(id="c-9"), 4, {"c-9": None}) == "c-9#4"
