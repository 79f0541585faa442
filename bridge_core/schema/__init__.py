# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Typed records exchanged with the host application."""

from bridge_core.schema.contact import Contact
from bridge_core.schema.enrichment import (
    SCORE_DIMENSIONS,
    EnrichmentData,
    EnrichmentResult,
    ScoreProvenance,
    Scores,
    Track,
)
from bridge_core.schema.evidence import Evidence
from bridge_core.schema.serialization import SchemaModel

__all__ = [
    "Contact",
    "Evidence",
    "EnrichmentData",
    "EnrichmentResult",
    "SCORE_DIMENSIONS",
    "SchemaModel",
    "ScoreProvenance",
    "Scores",
    "Track",
]
