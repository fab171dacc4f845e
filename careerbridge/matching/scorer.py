"""Overlap scoring between a candidate skill set and a requirement set."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from careerbridge.matching.models import MatchResult
from careerbridge.matching.skills import SkillSet

_ONE_DECIMAL = Decimal("0.1")


def percentage(part: int, whole: int) -> float:
    """Return ``100 * part / whole`` rounded half-up to one decimal place.

    Returns 0.0 when ``whole`` is zero.
    """
    if whole <= 0:
        return 0.0
    value = Decimal(100 * part) / Decimal(whole)
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def score(
    candidate: SkillSet, required: SkillSet, subject_id: int | str | None = None
) -> MatchResult:
    """Score how much of ``required`` the candidate already covers.

    An empty requirement set cannot be satisfied meaningfully and scores 0
    with no matched or missing skills.
    """
    if not required:
        return MatchResult(subject_id=subject_id, score=0.0)

    matched = candidate & required
    missing = required - candidate
    return MatchResult(
        subject_id=subject_id,
        score=percentage(len(matched), len(required)),
        matched=frozenset(matched),
        missing=frozenset(missing),
    )


def relevance(candidate: SkillSet, related: SkillSet) -> float:
    """Share of ``related`` skills the candidate does not have yet, in percent.

    A resource that only covers known skills scores 0; one made entirely of
    new skills scores 100; one with no skills listed scores 0.
    """
    return percentage(len(related - candidate), len(related))
