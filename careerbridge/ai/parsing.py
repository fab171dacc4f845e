"""Recover a JSON object from provider output.

Providers are asked for bare JSON but sometimes wrap it in prose or code
fences. Parsing tries the whole text first, then the first balanced
``{...}`` substring. Anything else is a ``MalformedAiResponse``; an empty
result is never invented.
"""

from __future__ import annotations

import json
from typing import Any

from careerbridge.errors import MalformedAiResponse


def find_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring of ``text``, or None.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return None


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of ``text``.

    Raises:
        MalformedAiResponse: If no JSON object can be recovered.
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    candidate = find_balanced_object(text) if isinstance(text, str) else None
    if candidate is None:
        raise MalformedAiResponse(
            "AI response did not contain a JSON object", raw_response=text
        )

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedAiResponse(
            f"AI response contained invalid JSON: {e}",
            raw_response=text,
            original_error=e,
        ) from e
