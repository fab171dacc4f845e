"""Input validation helpers.

``parse_choice`` and ``require_int`` check caller input and raise
``InvalidInput``. The ``optional_*`` / ``text_items`` coercions never raise;
they normalize loosely shaped provider output before pydantic sees it.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TypeVar

from careerbridge.errors import InvalidInput

EnumT = TypeVar("EnumT", bound=Enum)

_LEADING_NUMBER = re.compile(r"\s*(\d+(?:\.\d+)?)")


def parse_choice(
    enum_cls: type[EnumT], value: EnumT | str | None, field: str
) -> EnumT | None:
    """Parse an optional enum value given as a member or a case-insensitive name."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in enum_cls)
    raise InvalidInput(f"Invalid {field}: {value!r}. Must be one of: {allowed}")


def require_int(value: object, field: str, minimum: int, maximum: int) -> int:
    """Return ``value`` if it is an int (not a bool) within the inclusive bounds."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field} must be an integer (got {value!r})")
    if not (minimum <= value <= maximum):
        raise InvalidInput(
            f"{field} must be between {minimum} and {maximum} (got {value})"
        )
    return value


def optional_text(value: object) -> str | None:
    """Numbers become text, strings are stripped; blanks and anything else are None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def text_items(value: object) -> list[str]:
    """Coerce a loosely typed list of labels to non-blank strings.

    A lone string becomes a one-item list. Objects contribute their
    ``name`` or ``title``. Other shapes yield ``[]``.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("name") or item.get("title")
        if isinstance(item, str) and item.strip():
            items.append(item.strip())
    return items


def optional_number(value: object) -> float | None:
    """Read 5, "5", "5+" or "5 years" as 5.0; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and (match := _LEADING_NUMBER.match(value)):
        return float(match.group(1))
    return None


def optional_int(value: object) -> int | None:
    """Whole numbers (or digit-only strings) as ``int``; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
