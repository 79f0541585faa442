# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T", bound="SchemaModel")


class SchemaModel(BaseModel):
    """
    Canonical base for schema models (Pydantic v2).

    - Ignores extra fields so host records can carry UI/persistence fields.
    - camelCase aliases at the JSON boundary, snake_case attributes in Python.
    - Provides `to_dict()` / `from_dict()` for consistent serialization.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        if not isinstance(data, dict):
            raise TypeError(f"Schema input must be a dict, got: {type(data)!r}")
        return cls.model_validate(data)


def utc_now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a `Z` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_iso(raw: Any) -> datetime | None:
    """Parse an ISO-8601 string. Returns None for anything unparseable."""
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    if not s:
        return None
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    # fromisoformat on 3.10 accepts only 3 or 6 fraction digits.
    s = _FRACTION_RE.sub(lambda m: m.group(1) + "." + (m.group(2) + "000000")[:6], s, count=1)
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def normalize_timestamp(raw: Any) -> str:
    """Re-emit a valid timestamp in canonical form, defaulting to now."""
    parsed = parse_iso(raw)
    if parsed is None:
        return utc_now_iso()
    return to_iso(parsed)
