# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Bridge Core Engine
==================

Evidence-gated contact enrichment: web evidence collection and
verification, a ranked model cascade, and defensive output normalization.
"""

__version__ = "0.1.0"

# Bump when analysis/evidence prompts change so stored results can be compared.
PROMPT_VERSION = "enrich_v2"
