# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Model Cascade.

Resilient chat invocation over an ordered list of candidate models:
- first success wins (no best-of-N)
- one compatibility retry per candidate when a request option is rejected
- session-level failures (sdk/auth/rate limit) halt the cascade immediately
- exhaustion raises PipelineError(model_unavailable | all_models_failed)
  carrying the full attempt log
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from bridge_core.llm.chat import ChatCapability
from bridge_core.llm.failures import (
    FailureCode,
    classify_failure,
    compatibility_retry_options,
    error_message,
    failure_to_trace_data,
    is_session_level,
)
from bridge_core.pipeline.errors import ModelAttemptFailure, PipelineError
from bridge_core.utils.trace import Trace

logger = logging.getLogger(__name__)

# Empty model id: let the capability choose its own default.
DEFAULT_MODEL_SENTINEL = ""


class ModelCascade:
    """
    Drives a ChatCapability across a ranked list of models.

    Example:
        cascade = ModelCascade(chat)
        response = await cascade.invoke(
            prompt,
            ["gemini-2.5-pro", "gemini-2.5-flash"],
            {"tools": [{"type": "web_search"}]},
            context_label="evidence-search",
        )
    """

    def __init__(self, chat: ChatCapability | None):
        self.chat = chat

    @property
    def available(self) -> bool:
        return self.chat is not None and callable(getattr(self.chat, "chat", None))

    async def _call(self, prompt: str, options: dict[str, Any]) -> Any:
        return await self.chat.chat(prompt, options)  # type: ignore[union-attr]

    async def invoke(
        self,
        prompt: str,
        candidate_models: Sequence[str],
        options: dict[str, Any] | None = None,
        *,
        context_label: str = "analysis",
    ) -> Any:
        """
        Try each candidate in order, then the default-model sentinel.

        Raises:
            PipelineError: sdk_unavailable when there is no chat capability;
                the session-level code on an early halt; model_unavailable or
                all_models_failed once every candidate has failed.
        """
        if not self.available:
            raise PipelineError(
                f"AI chat capability unavailable during {context_label}.",
                FailureCode.SDK_UNAVAILABLE,
                context_label,
            )

        base_options = {k: v for k, v in (options or {}).items() if k != "model"}
        candidates = [*candidate_models, DEFAULT_MODEL_SENTINEL]
        attempts: list[ModelAttemptFailure] = []

        for candidate in candidates:
            model = (candidate or "").strip()
            model_label = model or "default"
            merged = {**base_options, "model": model} if model else dict(base_options)

            try:
                response = await self._call(prompt, merged)
                Trace.event("cascade.attempt.ok", {
                    "context": context_label,
                    "model": model_label,
                    "prior_failures": len(attempts),
                })
                return response
            except Exception as exc:
                effective_exc: Exception = exc

            retry_options = compatibility_retry_options(merged, effective_exc)
            if retry_options is not None:
                removed = sorted(set(merged) - set(retry_options))
                logger.warning(
                    "[Cascade] %s: retrying %s without unsupported options %s",
                    context_label, model_label, removed,
                )
                Trace.event("cascade.attempt.compat_retry", {
                    "context": context_label,
                    "model": model_label,
                    "removed_options": removed,
                })
                try:
                    response = await self._call(prompt, retry_options)
                    Trace.event("cascade.attempt.ok", {
                        "context": context_label,
                        "model": model_label,
                        "prior_failures": len(attempts),
                        "compat_retry": True,
                    })
                    return response
                except Exception as retry_exc:
                    effective_exc = retry_exc

            code = classify_failure(effective_exc)
            attempts.append(ModelAttemptFailure(
                model=model_label,
                code=code,
                error=error_message(effective_exc),
            ))
            logger.warning(
                "[Cascade] %s model failed: %s (code=%s): %s",
                context_label, model_label, code.value, effective_exc,
            )
            Trace.event("cascade.attempt.failed", {
                "context": context_label,
                "model": model_label,
                **failure_to_trace_data(code, effective_exc),
            })

            if is_session_level(code):
                Trace.event("cascade.halted", {"context": context_label, "code": code.value})
                raise PipelineError(
                    f"Model fallback halted during {context_label}: {error_message(effective_exc)}",
                    code,
                    context_label,
                    attempts,
                )

        all_unavailable = bool(attempts) and all(a.code is FailureCode.MODEL_UNAVAILABLE for a in attempts)
        final_code = FailureCode.MODEL_UNAVAILABLE if all_unavailable else FailureCode.ALL_MODELS_FAILED
        logger.error(
            "[Cascade] All model candidates failed for %s (code=%s, attempts=%d)",
            context_label, final_code.value, len(attempts),
        )
        Trace.event("cascade.exhausted", {
            "context": context_label,
            "code": final_code.value,
            "attempts": [a.to_dict() for a in attempts],
        })
        raise PipelineError(
            f"All model candidates failed for {context_label}.",
            final_code,
            context_label,
            attempts,
        )
