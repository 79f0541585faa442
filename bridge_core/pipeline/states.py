# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""State machine bookkeeping for one enrichment run."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from bridge_core.llm.failures import FailureCode


class PipelineState(str, Enum):
    GATHERING_EVIDENCE = "gathering_evidence"
    GATE_CHECK = "gate_check"
    ANALYZING = "analyzing"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


# Linear order; FAILED is reachable from every non-terminal state.
_FORWARD: dict[PipelineState, PipelineState] = {
    PipelineState.GATHERING_EVIDENCE: PipelineState.GATE_CHECK,
    PipelineState.GATE_CHECK: PipelineState.ANALYZING,
    PipelineState.ANALYZING: PipelineState.NORMALIZING,
    PipelineState.NORMALIZING: PipelineState.DONE,
}

TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.FAILED})


class InvalidTransition(RuntimeError):
    pass


@dataclass
class StateTransition:
    state: PipelineState
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {"state": self.state.value, "timestamp": self.timestamp}


@dataclass
class EnrichmentRun:
    """Transitions of a single `EnrichmentPipeline.enrich` call."""

    contact_id: str
    state: PipelineState | None = None
    transitions: list[StateTransition] = field(default_factory=list)
    failure_code: FailureCode | None = None
    started_at: float | None = None
    completed_at: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def visited(self) -> list[PipelineState]:
        return [t.state for t in self.transitions]

    def enter(self, state: PipelineState) -> None:
        """
        Move to `state`.

        Raises:
            InvalidTransition: on a skip, a revisit or leaving a terminal state.
        """
        now = time.time()
        if self.state is None:
            if state not in (PipelineState.GATHERING_EVIDENCE, PipelineState.FAILED):
                raise InvalidTransition(f"Run must start in gathering_evidence, not {state.value}")
            self.started_at = now
        elif self.is_terminal:
            raise InvalidTransition(f"Run already finished in {self.state.value}")
        elif state is not PipelineState.FAILED and _FORWARD.get(self.state) is not state:
            raise InvalidTransition(f"Cannot move from {self.state.value} to {state.value}")

        self.state = state
        self.transitions.append(StateTransition(state=state, timestamp=now))
        if state in TERMINAL_STATES:
            self.completed_at = now

    def fail(self, code: FailureCode) -> None:
        self.failure_code = code
        self.enter(PipelineState.FAILED)

    def to_dict(self) -> dict[str, Any]:
        duration = None
        if self.started_at is not None and self.completed_at is not None:
            duration = self.completed_at - self.started_at
        return {
            "contact_id": self.contact_id,
            "state": self.state.value if self.state else None,
            "failure_code": self.failure_code.value if self.failure_code else None,
            "transitions": [t.to_dict() for t in self.transitions],
            "duration_s": duration,
        }
