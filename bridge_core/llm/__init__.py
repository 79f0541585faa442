# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""LLM utilities package."""

from .failures import (
    FailureCode,
    classify_failure,
    compatibility_retry_options,
    failure_to_trace_data,
    is_session_level,
)

__all__ = [
    "FailureCode",
    "classify_failure",
    "compatibility_retry_options",
    "failure_to_trace_data",
    "is_session_level",
]
