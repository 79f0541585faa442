# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Evidence record.

Evidence is a (claim, url, timestamp, confidence) tuple asserting a
verifiable fact about a contact. Instances are only ever built by the
evidence normalizer, which guarantees:

1. `url` parses as an absolute http(s) URL
2. `(claim, url)` is unique within a result set
3. `confidence` is an int in [0, 100]
4. `timestamp` is canonical UTC ISO-8601
"""

from __future__ import annotations

from pydantic import Field

from bridge_core.schema.serialization import SchemaModel


class Evidence(SchemaModel):
    """
    A single verifiable fact about a contact.

    Example:
        Evidence(
            claim="Speaker bio at Maritime Forum 2025",
            url="https://www.maritimeforum.org/speakers/jordan-example",
            timestamp="2026-02-01T00:00:00.000Z",
            confidence=84,
        )
    """

    claim: str
    url: str
    timestamp: str
    confidence: int = Field(default=50, ge=0, le=100)

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return (self.claim, self.url)
