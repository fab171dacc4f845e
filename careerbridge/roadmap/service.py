"""Career roadmap lifecycle: generate, persist, track progress, delete.

Roadmaps are owned by exactly one user. Every read and write is scoped by
owner; a roadmap owned by someone else is indistinguishable from one that
does not exist.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from careerbridge.ai.client import AIClient
from careerbridge.ai.config import AIConfig, get_ai_config
from careerbridge.ai.parsing import parse_json_object
from careerbridge.ai.prompts import build_roadmap_prompt
from careerbridge.config.settings import AIProvider, Settings, get_settings
from careerbridge.errors import InvalidInput, MalformedAiResponse, NotFound, logged
from careerbridge.matching.skills import dedupe_skill_names
from careerbridge.storage.models import AIExtractionRecord, CareerRoadmap, RoadmapContent
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.validation import parse_choice, require_int

logger = logging.getLogger(__name__)

EXTRACTION_TYPE = "career_roadmap"

MAX_TIMEFRAME_MONTHS = 24
MAX_LEARNING_HOURS_PER_WEEK = 80


def validate_content(content: RoadmapContent | dict) -> RoadmapContent:
    """Validate roadmap content, raising ``InvalidInput`` on structural problems."""
    if isinstance(content, RoadmapContent):
        return content
    if not isinstance(content, dict):
        raise InvalidInput("Roadmap content must be an object")
    try:
        return RoadmapContent.model_validate(content)
    except ValidationError as e:
        raise InvalidInput(f"Invalid roadmap content: {_summarize(e)}") from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "content"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class RoadmapService:
    """Create and manage career roadmaps for users."""

    def __init__(
        self,
        repository: CareerRepository,
        ai_client: AIClient | None = None,
        settings: Settings | None = None,
        ai_config: AIConfig | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or get_settings()
        self.ai_config = ai_config or get_ai_config()
        self.ai_client = ai_client or AIClient(self.ai_config)

    def _resolve_provider(self, provider: AIProvider | str | None) -> AIProvider:
        try:
            resolved = parse_choice(AIProvider, provider, "AI provider")
        except InvalidInput as e:
            raise logged(logger, e) from None
        return resolved or self.settings.default_ai_provider

    def _check_plan(self, timeframe_months: int | None, hours: int | None) -> None:
        try:
            if timeframe_months is not None:
                require_int(timeframe_months, "timeframe_months", 1, MAX_TIMEFRAME_MONTHS)
            if hours is not None:
                require_int(
                    hours, "learning_hours_per_week", 1, MAX_LEARNING_HOURS_PER_WEEK
                )
        except InvalidInput as e:
            raise logged(logger, e) from None

    @staticmethod
    def _clean_role(target_role: str) -> str:
        role = target_role.strip() if isinstance(target_role, str) else ""
        if not role:
            raise logged(logger, InvalidInput("target_role is required"))
        return role

    async def generate_roadmap(
        self,
        user_id: str,
        target_role: str,
        timeframe_months: int = 6,
        learning_hours_per_week: int = 10,
        provider: AIProvider | str | None = None,
        include_current_skills: bool = True,
    ) -> CareerRoadmap:
        """Ask a provider for a roadmap and persist it for ``user_id``.

        Raises:
            InvalidInput: Blank role, out-of-range plan or unknown provider.
            NotFound: Unknown user.
            UpstreamUnavailable: The provider call failed.
            MalformedAiResponse: The provider's roadmap was unparseable or
                structurally invalid (e.g. a phase without topics). Nothing
                is persisted in that case.
        """
        role = self._clean_role(target_role)
        self._check_plan(timeframe_months, learning_hours_per_week)
        resolved = self._resolve_provider(provider)

        user = await self.repository.get_user(user_id)
        if user is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        current_skills = dedupe_skill_names(user.skills) if include_current_skills else []

        prompt = build_roadmap_prompt(
            target_role=role,
            timeframe_months=timeframe_months,
            learning_hours_per_week=learning_hours_per_week,
            current_skills=current_skills,
        )
        logger.info("Generating roadmap to %s for user %s via %s", role, user_id, resolved.value)
        raw_output = await self.ai_client.invoke(
            prompt, resolved, temperature=self.ai_config.roadmap_temperature
        )

        parsed = None
        error: MalformedAiResponse | None = None
        try:
            parsed = parse_json_object(raw_output)
            content = validate_content(parsed)
        except MalformedAiResponse as e:
            error = e
        except InvalidInput as e:
            error = MalformedAiResponse(str(e), raw_response=raw_output, original_error=e)

        status = "malformed" if error is not None else "success"
        await self._audit(user_id, role, resolved, raw_output, parsed, status)
        if error is not None:
            raise logged(logger, error)
        return await self.create_roadmap(
            user_id,
            role,
            content,
            provider=resolved,
            timeframe_months=timeframe_months,
            learning_hours_per_week=learning_hours_per_week,
            current_skills=current_skills,
        )

    async def _audit(
        self,
        user_id: str,
        role: str,
        provider: AIProvider,
        raw_output: str,
        parsed: dict | None,
        status: str,
    ) -> int:
        return await self.repository.insert_ai_extraction(
            AIExtractionRecord(
                user_id=user_id,
                extraction_type=EXTRACTION_TYPE,
                provider=provider.value,
                input_text=role,
                raw_output=raw_output,
                extracted_data=parsed,
                status=status,
            )
        )

    async def create_roadmap(
        self,
        user_id: str,
        target_role: str,
        content: RoadmapContent | dict,
        provider: AIProvider | str | None = None,
        timeframe_months: int | None = None,
        learning_hours_per_week: int | None = None,
        current_skills: Sequence[str] = (),
    ) -> CareerRoadmap:
        """Validate and persist a roadmap with zero progress.

        Raises:
            InvalidInput: Blank role or structurally invalid content.
            NotFound: Unknown user.
        """
        role = self._clean_role(target_role)
        try:
            validated = validate_content(content)
        except InvalidInput as e:
            raise logged(logger, e) from None
        self._check_plan(timeframe_months, learning_hours_per_week)
        resolved = self._resolve_provider(provider)

        if await self.repository.get_user(user_id) is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))

        roadmap = await self.repository.insert_roadmap(
            user_id=user_id,
            title=f"Roadmap to {role}",
            target_role=role,
            content=validated,
            ai_provider=resolved.value,
            timeframe_months=timeframe_months,
            learning_hours_per_week=learning_hours_per_week,
            current_skills=current_skills,
        )
        logger.info(
            "Saved roadmap %s for user %s (%s phase(s))",
            roadmap.id,
            user_id,
            len(validated.phases),
        )
        return roadmap

    async def update_progress(
        self,
        roadmap_id: int,
        owner_id: str,
        percentage: int,
        completed_phases: Iterable[int] | None = (),
        notes: str | None = None,
    ) -> CareerRoadmap:
        """Replace progress, completed phases and notes in one write.

        Completed phases are not checked against the roadmap's own phase
        numbers. ``None`` clears them.

        Raises:
            InvalidInput: Percentage outside 0..100 or a non-positive phase.
            NotFound: The roadmap does not exist or is owned by someone else.
        """
        if completed_phases is None:
            completed_phases = ()
        try:
            progress = require_int(percentage, "progress_percentage", 0, 100)
            if isinstance(completed_phases, str) or not isinstance(
                completed_phases, Iterable
            ):
                raise InvalidInput("completed_phases must be a list of phase numbers")
            phases = set()
            for phase in completed_phases:
                if isinstance(phase, bool) or not isinstance(phase, int) or phase < 1:
                    raise InvalidInput(
                        f"completed_phases must be positive integers (got {phase!r})"
                    )
                phases.add(phase)
        except InvalidInput as e:
            raise logged(logger, e) from None
        if notes is not None and not isinstance(notes, str):
            raise logged(logger, InvalidInput("notes must be a string"))

        roadmap = await self.repository.update_roadmap_progress(
            roadmap_id, owner_id, progress, phases, notes
        )
        if roadmap is None:
            raise logged(logger, NotFound(f"Roadmap not found: {roadmap_id}"))
        logger.info("Roadmap %s progress set to %s%%", roadmap_id, progress)
        return roadmap

    async def delete_roadmap(self, roadmap_id: int, owner_id: str) -> None:
        """Permanently delete a roadmap owned by ``owner_id``."""
        if not await self.repository.delete_roadmap(roadmap_id, owner_id):
            raise logged(logger, NotFound(f"Roadmap not found: {roadmap_id}"))
        logger.info("Deleted roadmap %s", roadmap_id)

    async def list_roadmaps(self, owner_id: str) -> list[CareerRoadmap]:
        return await self.repository.list_roadmaps(owner_id)

    async def get_roadmap(self, roadmap_id: int, owner_id: str) -> CareerRoadmap:
        roadmap = await self.repository.get_roadmap(roadmap_id, owner_id)
        if roadmap is None:
            raise logged(logger, NotFound(f"Roadmap not found: {roadmap_id}"))
        return roadmap
