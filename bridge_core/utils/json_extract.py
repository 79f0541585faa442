# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Defensive extraction of text and JSON from chat responses.

Chat capabilities return strings, message dicts, SDK response objects or
markdown-wrapped JSON. Everything here is tolerant: it returns None / the
input rather than raising on malformed content.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def response_to_text(response: Any) -> str:
    if isinstance(response, str):
        return response
    if response is None:
        return ""

    output_text = getattr(response, "output_text", None)
    if isinstance(output_text, str):
        return output_text

    if isinstance(response, dict):
        message = response.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
            if isinstance(content, list):
                parts: list[str] = []
                for part in content:
                    if isinstance(part, str):
                        parts.append(part)
                    elif isinstance(part, dict) and isinstance(part.get("text"), str):
                        parts.append(part["text"])
                return "\n".join(parts).strip()
        if isinstance(response.get("text"), str):
            return response["text"]
        if isinstance(response.get("content"), str):
            return response["content"]

    try:
        return json.dumps(response, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(response)


def extract_first_json_object(text: str) -> str | None:
    """First balanced `{...}` in text, skipping braces inside JSON strings."""
    start = -1
    depth = 0
    in_string = False
    escape = False

    for i, ch in enumerate(text or ""):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start >= 0:
                return text[start:i + 1]
    return None


def extract_json(text: str) -> str:
    """Best JSON-object candidate: fenced block, else first balanced object, else the text."""
    fenced = _FENCE_RE.search(text or "")
    if fenced:
        return fenced.group(1).strip()
    first = extract_first_json_object(text or "")
    if first:
        return first
    return text or ""


def extract_json_array(text: str) -> str | None:
    fenced = _FENCE_RE.search(text or "")
    candidate = fenced.group(1).strip() if fenced else (text or "")
    match = _ARRAY_RE.search(candidate)
    return match.group(0) if match else None


def try_parse_json(text: str | None) -> Any | None:
    if not text:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
