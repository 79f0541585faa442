# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Pipeline Errors

Exceptions raised inside the enrichment pipeline. They never escape
`EnrichmentPipeline.enrich`; the controller converts them into failure
results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bridge_core.llm.failures import FailureCode, classify_failure, error_message


@dataclass(frozen=True)
class ModelAttemptFailure:
    """One failed cascade attempt: which model, how it was classified, what it said."""

    model: str
    code: FailureCode
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"model": self.model, "code": self.code.value, "error": self.error}

    def describe(self) -> str:
        return f"Model {self.model} failed ({self.code.value}): {self.error}"


class PipelineError(Exception):
    """
    Raised when a pipeline stage cannot complete.

    Attributes:
        code: Classified failure code
        context_label: Stage that raised (e.g. "evidence-search", "contact-analysis")
        attempts: Cascade attempt log, possibly empty
    """

    def __init__(
        self,
        message: str,
        code: FailureCode,
        context_label: str,
        attempts: list[ModelAttemptFailure] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.context_label = context_label
        self.attempts: list[ModelAttemptFailure] = list(attempts or [])

    @classmethod
    def from_exception(cls, exc: BaseException, context_label: str) -> PipelineError:
        """Wrap an arbitrary exception, classifying it. PipelineErrors pass through."""
        if isinstance(exc, PipelineError):
            return exc
        return cls(
            f"Enrichment request failed during {context_label}: {error_message(exc)}",
            classify_failure(exc),
            context_label,
        )

    def to_trace_dict(self) -> dict[str, Any]:
        return {
            "error": "pipeline_error",
            "code": self.code.value,
            "context": self.context_label,
            "message": self.message[:200],
            "attempts": [a.to_dict() for a in self.attempts],
        }
