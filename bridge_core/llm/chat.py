# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
AI-chat capability.

The pipeline only depends on the `ChatCapability` protocol:

    await chat(prompt, {"model": ..., "tools": [...], "temperature": ...})

Hosts may pass any object with a compatible `chat` coroutine, or None when
no AI runtime is available (classified as `sdk_unavailable`).

`OpenAIChatCapability` is the default adapter over the OpenAI Responses API.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol, runtime_checkable

from openai import AsyncOpenAI

from bridge_core.utils.trace import Trace

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatCapability(Protocol):
    async def chat(self, prompt: str, options: dict[str, Any]) -> Any:
        ...


class OpenAIChatCapability:
    """
    Chat capability backed by the OpenAI Responses API.

    Option mapping:
    - model: Responses `model` (falls back to `default_model` when absent)
    - tools: passed through (e.g. [{"type": "web_search"}])
    - temperature: passed through; models that reject it raise an
      "unsupported parameter" error which the cascade strips and retries

    Provider-prefixed ids ("openai/gpt-5-nano") are reduced to the bare model
    name. Ids for other providers reach the API unchanged and fail as
    model-unavailable, letting the cascade move on.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        default_model: str = "gpt-5-mini",
        timeout_sec: float = 60.0,
        max_retries: int = 1,
        client: AsyncOpenAI | None = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout_sec, max_retries=max_retries)
        self.default_model = default_model

    @staticmethod
    def _resolve_model(model: str | None, default: str) -> str:
        name = (model or "").strip() or default
        if name.startswith("openai/"):
            name = name[len("openai/"):]
        return name

    async def chat(self, prompt: str, options: dict[str, Any]) -> str:
        model = self._resolve_model(options.get("model"), self.default_model)
        params: dict[str, Any] = {"model": model, "input": prompt}
        if options.get("tools"):
            params["tools"] = options["tools"]
        if options.get("temperature") is not None:
            params["temperature"] = options["temperature"]

        start = time.time()
        response = await self.client.responses.create(**params)
        latency_ms = int((time.time() - start) * 1000)

        content = response.output_text or ""
        if not content.strip():
            if getattr(response, "error", None):
                raise ValueError(f"LLM error: {response.error}")
            raise ValueError("Empty response from LLM")

        Trace.event("llm.chat.response", {
            "model": getattr(response, "model", model),
            "content_chars": len(content),
            "latency_ms": latency_ms,
        })
        logger.debug("[OpenAIChat] %s responded in %dms (%d chars)", model, latency_ms, len(content))
        return content

    async def close(self) -> None:
        await self.client.close()
