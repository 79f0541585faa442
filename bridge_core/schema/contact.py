# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from bridge_core.schema.enrichment import EnrichmentData, Scores
from bridge_core.schema.serialization import SchemaModel


class Contact(SchemaModel):
    """
    Raw contact record supplied by the host application.

    Frozen: the pipeline never mutates a contact during an enrichment call.
    UI/persistence fields (lists, outreach drafts, ingestion metadata) are
    ignored on load.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    id: str = ""
    name: str = ""
    headline: str = ""
    location: str = ""
    source: str = ""
    raw_text: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: str = "New"

    scores: Scores | None = None
    enrichment: EnrichmentData | None = None
