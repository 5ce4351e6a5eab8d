# skill_parser.py
from __future__ import annotations

from typing import Any

_QUOTES = "\"'"


def _clean_token(value: str) -> str:
    token = value.strip()
    # Strip one layer of surrounding quotes ("Java" / 'Java'), then whitespace again.
    if len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]:
        token = token[1:-1].strip()
    else:
        token = token.strip(_QUOTES).strip()
    return token


def parse_skill_list(raw: Any) -> list[str]:
    """Split a stored skill string into ordered, trimmed tokens.

    Accepts ``None``, comma separated text (``"Java, Go"``) or JSON-array-like
    text (``'["Java", "Go"]'``). The bracket form is scanned loosely rather than
    parsed as JSON, so malformed input still yields whatever tokens it holds.
    Case is preserved.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [t for t in (_clean_token(str(item)) for item in raw if item is not None) if t]

    text = str(raw).strip()
    if not text:
        return []

    # Either bracket may be missing when the stored value was truncated.
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]

    tokens: list[str] = []
    for part in text.split(","):
        token = _clean_token(part)
        if token:
            tokens.append(token)
    return tokens


def normalize_skill_name(value: str) -> str:
    return value.strip().lower()
