# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Enrichment pipeline.

The controller lives in `bridge_core.pipeline.controller`; it is not
re-exported here because the model cascade imports `pipeline.errors`.
"""

from bridge_core.pipeline.errors import ModelAttemptFailure, PipelineError
from bridge_core.pipeline.states import EnrichmentRun, InvalidTransition, PipelineState

__all__ = [
    "EnrichmentRun",
    "InvalidTransition",
    "ModelAttemptFailure",
    "PipelineError",
    "PipelineState",
]
