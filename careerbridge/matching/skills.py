"""Skill normalization utilities.

Skills are compared by exact canonical string only: ``"JS"`` and
``"JavaScript"`` are different skills. There is no alias table and no
fuzzy matching.
"""

from __future__ import annotations

from collections.abc import Iterable

SkillSet = frozenset[str]


def canonical_skill(skill: str) -> str:
    """Return the canonical form of a skill name (trimmed, lower-cased)."""
    return skill.strip().lower()


def to_skill_set(skills: Iterable[object] | None) -> SkillSet:
    """Canonicalize raw skill strings into a comparable set.

    Blank entries and non-strings are dropped silently; free-text input is
    expected to be noisy.
    """
    if not skills:
        return frozenset()
    canonical = (canonical_skill(s) for s in skills if isinstance(s, str))
    return frozenset(s for s in canonical if s)


def dedupe_skill_names(skills: Iterable[str]) -> list[str]:
    """Drop blanks and case-insensitive repeats, keeping first casing and order."""
    return merge_skill_names([], skills)


def merge_skill_names(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Append the names in ``new`` that ``existing`` does not already contain.

    Membership is decided on canonical names. ``existing`` keeps its order
    and casing; each added name keeps the casing of its first occurrence.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for name in [*existing, *new]:
        if not isinstance(name, str):
            continue
        key = canonical_skill(name)
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(name.strip())
    return merged
