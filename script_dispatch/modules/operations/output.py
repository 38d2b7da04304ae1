"""Best-effort decoding of script output reported by endpoints."""

from __future__ import annotations

import json
from typing import Any

_ESCAPES = (
    ("\\r\\n", "\n"),
    ("\\n", "\n"),
    ('\\"', '"'),
    ("\\\\", "\\"),
)
_FAILED = object()


def decode_output(raw: Any) -> Any:
    """Decode endpoint output into structured data, falling back to the raw text.

    Never raises, and values that are not text come back unchanged.  Script
    output frequently arrives as JSON that was escaped once more on its way
    through the backend, so a direct parse is tried first, then a parse of the
    inner string, then a parse after stripping the usual escaping artifacts.
    """
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if not text:
        return raw

    parsed = _try_json(text)
    if parsed is not _FAILED:
        if isinstance(parsed, str):
            inner = _try_json(parsed.strip())
            if inner is not _FAILED and not isinstance(inner, str):
                return inner
        return parsed

    unescaped = _unescape(text)
    if unescaped != text:
        parsed = _try_json(unescaped)
        if parsed is not _FAILED:
            return parsed
    return raw


def _try_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return _FAILED


def _unescape(text: str) -> str:
    for source, target in _ESCAPES:
        text = text.replace(source, target)
    return text


__all__ = ["decode_output"]
