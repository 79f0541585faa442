# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Enrichment Failure Classification.

Closed failure taxonomy for the enrichment pipeline:
- SDK_UNAVAILABLE: chat capability missing from the host runtime
- AUTH_REQUIRED: 401/403, session needs a sign-in
- RATE_LIMITED: 429 / quota exhausted
- TIMEOUT: request timed out or was aborted
- NETWORK: connection-level failure
- MODEL_UNAVAILABLE: the requested model is unknown or disabled
- ALL_MODELS_FAILED: every cascade candidate failed
- UNKNOWN: anything else
- EVIDENCE_GATE_BLOCKED: pipeline-level, evidence gate refused the contact

Error text is inherently fuzzy, so classification lives only here. Call
sites never pattern-match raw error messages themselves.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any


class FailureCode(str, Enum):
    SDK_UNAVAILABLE = "sdk_unavailable"
    AUTH_REQUIRED = "auth_required"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    NETWORK = "network"
    MODEL_UNAVAILABLE = "model_unavailable"
    ALL_MODELS_FAILED = "all_models_failed"
    UNKNOWN = "unknown"
    EVIDENCE_GATE_BLOCKED = "evidence_gate_blocked"


# Whole-session problems: retrying other models wastes calls and time.
SESSION_LEVEL_CODES = frozenset({
    FailureCode.SDK_UNAVAILABLE,
    FailureCode.AUTH_REQUIRED,
    FailureCode.RATE_LIMITED,
})

_SDK_KEYWORDS = (
    "chat capability unavailable",
    "runtime unavailable",
    "sdk unavailable",
    "has no attribute 'chat'",
    "'nonetype' object is not callable",
    "no module named",
)

_AUTH_STATUS_RE = re.compile(r"\b(401|403)\b")

_AUTH_KEYWORDS = (
    "unauthorized",
    "forbidden",
    "sign in",
    "signin",
    "auth",
)

_RATE_LIMIT_KEYWORDS = (
    "429",
    "rate limit",
    "rate_limit",
    "too many requests",
    "quota",
)

_TIMEOUT_KEYWORDS = (
    "timeout",
    "timed out",
    "deadline exceeded",
    "abort",
)

_NETWORK_KEYWORDS = (
    "network",
    "failed to fetch",
    "fetch failed",
    "connection error",
    "connection refused",
    "cors",
    "socket",
    "offline",
)

_MODEL_KEYWORDS = (
    "unknown model",
    "invalid model",
    "unsupported model",
    "model unavailable",
    "model not found",
    "model_not_found",
)

# Markers that an individual request option was rejected by the backend.
_UNSUPPORTED_OPTION_MARKERS = (
    "unsupported parameter",
    "unsupported value",
    "does not support",
    "not supported",
)


def error_message(exc: BaseException | Any) -> str:
    return str(exc) if exc is not None else ""


def classify_failure(exc: BaseException | Any) -> FailureCode:
    """
    Classify a capability exception into a FailureCode.

    Message keywords are checked first, in priority order; the exception's
    type name is the tiebreaker for errors with empty messages (e.g. a bare
    `asyncio.TimeoutError`).
    """
    msg = error_message(exc).lower()
    exc_type = type(exc).__name__.lower()

    if any(kw in msg for kw in _SDK_KEYWORDS):
        return FailureCode.SDK_UNAVAILABLE

    if _AUTH_STATUS_RE.search(msg) or any(kw in msg for kw in _AUTH_KEYWORDS):
        return FailureCode.AUTH_REQUIRED
    if "authentication" in exc_type or "permissiondenied" in exc_type:
        return FailureCode.AUTH_REQUIRED

    if any(kw in msg for kw in _RATE_LIMIT_KEYWORDS) or "ratelimit" in exc_type:
        return FailureCode.RATE_LIMITED

    if any(kw in msg for kw in _TIMEOUT_KEYWORDS) or "timeout" in exc_type:
        return FailureCode.TIMEOUT

    if any(kw in msg for kw in _NETWORK_KEYWORDS):
        return FailureCode.NETWORK
    if "connect" in exc_type or "network" in exc_type:
        return FailureCode.NETWORK

    if any(kw in msg for kw in _MODEL_KEYWORDS):
        return FailureCode.MODEL_UNAVAILABLE
    if "model" in msg and "does not exist" in msg:
        return FailureCode.MODEL_UNAVAILABLE

    return FailureCode.UNKNOWN


def is_session_level(code: FailureCode) -> bool:
    """Session-level failures halt the model cascade immediately."""
    return code in SESSION_LEVEL_CODES


def compatibility_retry_options(options: dict[str, Any], exc: BaseException | Any) -> dict[str, Any] | None:
    """
    Build a reduced option set when the error says a request option is unsupported.

    Any option key currently set (other than `model`) that the error text names
    alongside an "unsupported" marker is stripped. Returns None when nothing
    would change, so the caller skips the retry.
    """
    msg = error_message(exc).lower()
    if not any(marker in msg for marker in _UNSUPPORTED_OPTION_MARKERS):
        return None

    adjusted = dict(options)
    removed = [key for key in options if key != "model" and key.lower() in msg]
    for key in removed:
        adjusted.pop(key, None)
    return adjusted if removed else None


def failure_to_trace_data(code: FailureCode, exc: BaseException | Any) -> dict[str, Any]:
    return {
        "failure_code": code.value,
        "error_type": type(exc).__name__,
        "error_message": error_message(exc)[:200],
    }
