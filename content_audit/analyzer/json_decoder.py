"""Tolerant extraction of a JSON object from free-form model output."""

import json
import re

_FENCED = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def _loads_object(text: str) -> dict | None:
    try:
        data = json.loads(text)
    except (ValueError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def _balanced_object(text: str) -> str | None:
    """Return the first brace-balanced {...} span, ignoring braces in strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(text[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(raw: str | None) -> dict | None:
    """Decode a JSON object from model output.

    Tries, in order: the whole text, a fenced ```json block, the first
    balanced {...} span. Returns None when no JSON object can be found;
    arrays and scalars count as failures.
    """
    if not raw or not raw.strip():
        return None

    text = raw.strip()
    data = _loads_object(text)
    if data is not None:
        return data

    match = _FENCED.search(text)
    if match:
        data = _loads_object(match.group(1))
        if data is not None:
            return data

    span = _balanced_object(text)
    if span is not None:
        return _loads_object(span)
    return None
