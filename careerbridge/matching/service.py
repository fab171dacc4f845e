"""Job matching, resource recommendation and skill gap analysis."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from careerbridge.config.settings import Settings, get_settings
from careerbridge.errors import InvalidInput, NotFound, logged
from careerbridge.matching.models import (
    JobMatch,
    ResourceMatch,
    SkillGapReport,
)
from careerbridge.matching.scorer import percentage, relevance, score
from careerbridge.matching.skills import SkillSet, to_skill_set
from careerbridge.storage.models import ExperienceLevel, JobType, ResourceCost
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.validation import parse_choice, require_int

logger = logging.getLogger(__name__)


class MatchingService:
    """Rank jobs and learning resources for a user and analyze skill gaps.

    Every call reloads the user's skills and the candidate records; nothing
    is cached between calls.
    """

    def __init__(
        self, repository: CareerRepository, settings: Settings | None = None
    ) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    async def _load_skill_set(self, user_id: str) -> SkillSet:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        return to_skill_set(user.skills)

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.settings.default_result_limit
        try:
            return require_int(limit, "limit", 1, self.settings.max_result_limit)
        except InvalidInput as e:
            raise logged(logger, e) from None

    async def recommend_jobs(
        self,
        user_id: str,
        experience_level: ExperienceLevel | str | None = None,
        job_type: JobType | str | None = None,
        limit: int | None = None,
    ) -> list[JobMatch]:
        """Rank job postings by how much of each posting's required skills the user has.

        Sorted by score descending, then job id ascending, and truncated to
        ``limit`` only after sorting.
        """
        try:
            level = parse_choice(ExperienceLevel, experience_level, "experience level")
            kind = parse_choice(JobType, job_type, "job type")
        except InvalidInput as e:
            raise logged(logger, e) from None
        max_results = self._resolve_limit(limit)

        candidate = await self._load_skill_set(user_id)
        jobs = await self.repository.list_jobs(experience_level=level, job_type=kind)

        matches = [
            JobMatch(
                job=job,
                result=score(candidate, to_skill_set(job.required_skills), job.id),
            )
            for job in jobs
        ]
        matches.sort(key=lambda m: (-m.score, m.job.id))

        logger.debug(
            "Ranked %s job(s) for user %s (returning %s)",
            len(matches),
            user_id,
            min(len(matches), max_results),
        )
        return matches[:max_results]

    async def recommend_resources(
        self,
        user_id: str,
        cost: ResourceCost | str | None = None,
        limit: int | None = None,
    ) -> list[ResourceMatch]:
        """Rank learning resources by the share of their skills the user lacks.

        Resources listing no skills score 0 and always sort after resources
        that list some; otherwise relevance descending, then id ascending.
        """
        try:
            cost_filter = parse_choice(ResourceCost, cost, "cost")
        except InvalidInput as e:
            raise logged(logger, e) from None
        max_results = self._resolve_limit(limit)

        candidate = await self._load_skill_set(user_id)
        resources = await self.repository.list_resources(cost=cost_filter)

        keyed: list[tuple[tuple[bool, float, int], ResourceMatch]] = []
        for resource in resources:
            related = to_skill_set(resource.related_skills)
            match = ResourceMatch(
                resource=resource,
                relevance=relevance(candidate, related),
                new_skills=related - candidate,
            )
            keyed.append(((not related, -match.relevance, resource.id), match))
        keyed.sort(key=lambda item: item[0])
        return [match for _, match in keyed[:max_results]]

    async def analyze_skill_gap(
        self, user_id: str, target: str | Sequence[int]
    ) -> SkillGapReport:
        """Compare the user's skills with everything a role (or set of jobs) needs.

        Args:
            user_id: The user to analyze.
            target: A role name, matched case-insensitively as a substring of
                job titles, or a sequence of specific job ids.

        Raises:
            InvalidInput: If the role is blank or the id list is empty.
            NotFound: If the user or any listed job does not exist.
        """
        if isinstance(target, str):
            role = target.strip()
            if not role:
                raise logged(logger, InvalidInput("Target role must not be blank"))
            candidate = await self._load_skill_set(user_id)
            jobs = await self.repository.list_jobs_by_title(role)
            report_target: str | tuple[int, ...] = role
        else:
            job_ids = tuple(dict.fromkeys(target))
            if not job_ids:
                raise logged(logger, InvalidInput("At least one job id is required"))
            for job_id in job_ids:
                if isinstance(job_id, bool) or not isinstance(job_id, int):
                    error = InvalidInput(f"Job ids must be integers (got {job_id!r})")
                    raise logged(logger, error)
            candidate = await self._load_skill_set(user_id)
            jobs = await self.repository.list_jobs_by_ids(job_ids)
            missing_ids = sorted(set(job_ids) - {job.id for job in jobs})
            if missing_ids:
                listed = ", ".join(str(job_id) for job_id in missing_ids)
                raise logged(logger, NotFound(f"Job(s) not found: {listed}"))
            report_target = job_ids

        required: set[str] = set()
        for job in jobs:
            required |= to_skill_set(job.required_skills)

        matching = candidate & required
        return SkillGapReport(
            target=report_target,
            job_count=len(jobs),
            required_skills=frozenset(required),
            matching_skills=frozenset(matching),
            skill_gaps=frozenset(required - candidate),
            match_percentage=percentage(len(matching), len(required)),
        )
