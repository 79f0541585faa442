# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import pytest

from bridge_core.schema.serialization import normalize_timestamp, parse_iso


@pytest.mark.parametrize("raw,expected", [
    ("2026-01-15T10:00:00Z", "2026-01-15T10:00:00.000Z"),
    ("2026-01-15T10:00:00.5Z", "2026-01-15T10:00:00.500Z"),
    ("2026-01-15T10:00:00.12z", "2026-01-15T10:00:00.120Z"),
    ("2026-01-15T10:00:00.1234567+02:00", "2026-01-15T08:00:00.123Z"),
    ("2026-01-15 10:00:00.98765", "2026-01-15T10:00:00.987Z"),
    ("2026-01-15T10:00:00", "2026-01-15T10:00:00.000Z"),
])
def test_timestamps_reemitted_in_canonical_utc(raw, expected):
    assert normalize_timestamp(raw) == expected


@pytest.mark.parametrize("raw", [None, 1700000000, "", "   ", "yesterday", "2026-13-01T00:00:00Z"])
def test_unparseable_timestamps(raw):
    assert parse_iso(raw) is None
