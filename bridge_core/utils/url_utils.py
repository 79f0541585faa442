# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from __future__ import annotations

import re
from urllib.parse import urlparse

_TRAILING_PUNCT_RE = re.compile(r"[),.;:!?]+$")
_HTTP_URL_RE = re.compile(r"https?://[^\s)\"'<>\]]+", re.IGNORECASE)
_LINKEDIN_HOST_RE = re.compile(r"(^|\.)linkedin\.com$", re.IGNORECASE)
_LINKEDIN_URL_RE = re.compile(r"https?://(?:[\w-]+\.)?linkedin\.com/[^\s)\"'<>]+", re.IGNORECASE)


def clean_url(url: str) -> str:
    """Trim whitespace and trailing sentence punctuation picked up from prose."""
    return _TRAILING_PUNCT_RE.sub("", (url or "").strip())


def is_http_url(url: str) -> bool:
    if not url or not isinstance(url, str) or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(host)


def hostname_for_url(url: str) -> str:
    """Lowercased hostname without a leading `www.`; empty string if unparseable."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def is_linkedin_host(host: str) -> bool:
    return bool(host) and _LINKEDIN_HOST_RE.search(host) is not None


def is_linkedin_url(url: str) -> bool:
    return is_linkedin_host(hostname_for_url(url))


def extract_http_urls(text: str) -> list[str]:
    """All distinct valid http(s) URLs in `text`, in order of appearance."""
    out: list[str] = []
    seen: set[str] = set()
    for match in _HTTP_URL_RE.findall(text or ""):
        cleaned = clean_url(match)
        if not is_http_url(cleaned) or cleaned in seen:
            continue
        seen.add(cleaned)
        out.append(cleaned)
    return out


def extract_linkedin_url(*texts: str | None) -> str | None:
    """First LinkedIn URL found across the given text fields."""
    candidate = " ".join(t for t in texts if t)
    match = _LINKEDIN_URL_RE.search(candidate)
    if not match:
        return None
    return re.sub(r"[.,;:!?)]$", "", match.group(0))
