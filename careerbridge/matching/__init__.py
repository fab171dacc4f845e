"""Skill matching, recommendations and gap analysis.

Public API:
    - MatchingService: job/resource ranking and skill gap analysis
    - score / relevance: pure scoring functions
    - canonical_skill / to_skill_set / merge_skill_names: skill normalization
    - MatchResult, JobMatch, ResourceMatch, SkillGapReport: result types
"""

from careerbridge.matching.models import (
    JobMatch,
    MatchResult,
    ResourceMatch,
    SkillGapReport,
)
from careerbridge.matching.scorer import percentage, relevance, score
from careerbridge.matching.service import MatchingService
from careerbridge.matching.skills import (
    SkillSet,
    canonical_skill,
    dedupe_skill_names,
    merge_skill_names,
    to_skill_set,
)

__all__ = [
    "MatchingService",
    "MatchResult",
    "JobMatch",
    "ResourceMatch",
    "SkillGapReport",
    "SkillSet",
    "score",
    "relevance",
    "percentage",
    "canonical_skill",
    "to_skill_set",
    "merge_skill_names",
    "dedupe_skill_names",
]
