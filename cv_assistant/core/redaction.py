"""Redaction helpers for safe logging and error text."""

from __future__ import annotations

import re
from typing import Iterable, Optional

REDACTED = "<redacted>"

_BEARER_PATTERN = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+")
_FORM_SECRET_PATTERN = re.compile(
    r"(?i)((?:client_secret|access_token|api_key)[\"']?\s*[=:]\s*[\"']?)[^&\s\"',}]+"
)


def redact_string(value: str, secrets: Iterable[Optional[str]] = ()) -> str:
    """Mask bearer tokens, credential fields and any known secret values."""
    result = _BEARER_PATTERN.sub(rf"\1{REDACTED}", value)
    result = _FORM_SECRET_PATTERN.sub(rf"\1{REDACTED}", result)
    for secret in secrets:
        if secret:
            result = result.replace(secret, REDACTED)
    return result


def snippet(value: str, max_len: int = 200) -> str:
    """Collapse whitespace and truncate a response body for a log line."""
    collapsed = " ".join(value.split())
    if len(collapsed) > max_len:
        return collapsed[:max_len] + "..."
    return collapsed


__all__ = ["REDACTED", "redact_string", "snippet"]
