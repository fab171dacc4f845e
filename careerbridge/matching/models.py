"""Result types for the matching engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from careerbridge.storage.models import JobPosting, LearningResource


@dataclass(frozen=True)
class MatchResult:
    """Scored comparison of a candidate skill set against a required one.

    Computed fresh on every call and never persisted. ``matched`` and
    ``missing`` partition the required set.
    """

    subject_id: int | str | None
    score: float
    matched: frozenset[str] = field(default_factory=frozenset)
    missing: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not (0.0 <= self.score <= 100.0):
            raise ValueError(f"score must be between 0 and 100 (got {self.score})")
        if self.matched & self.missing:
            raise ValueError("matched and missing skills must not overlap")

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "score": self.score,
            "matched": sorted(self.matched),
            "missing": sorted(self.missing),
        }


@dataclass(frozen=True)
class JobMatch:
    """A job posting ranked for a user."""

    job: JobPosting
    result: MatchResult

    @property
    def score(self) -> float:
        return self.result.score

    @property
    def matched(self) -> frozenset[str]:
        return self.result.matched

    @property
    def missing(self) -> frozenset[str]:
        return self.result.missing

    def to_dict(self) -> dict:
        return {
            "job": self.job.to_dict(),
            "score": self.score,
            "matched": sorted(self.matched),
            "missing": sorted(self.missing),
        }


@dataclass(frozen=True)
class ResourceMatch:
    """A learning resource ranked by how many new skills it teaches."""

    resource: LearningResource
    relevance: float
    new_skills: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        return {
            "resource": self.resource.to_dict(),
            "relevance": self.relevance,
            "new_skills": sorted(self.new_skills),
        }


@dataclass(frozen=True)
class SkillGapReport:
    """What a user still needs for a role (or a set of postings)."""

    target: str | tuple[int, ...]
    job_count: int
    required_skills: frozenset[str]
    matching_skills: frozenset[str]
    skill_gaps: frozenset[str]
    match_percentage: float

    def to_dict(self) -> dict:
        return {
            "target": (
                self.target if isinstance(self.target, str) else list(self.target)
            ),
            "job_count": self.job_count,
            "required_skills": sorted(self.required_skills),
            "matching_skills": sorted(self.matching_skills),
            "skill_gaps": sorted(self.skill_gaps),
            "match_percentage": self.match_percentage,
        }
