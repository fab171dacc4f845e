"""Profile-aware career advice from an AI provider.

Every operation grounds its prompt on the user's skills, target roles and
experience level, and appends one audit entry per provider response, the
same way CV extraction and roadmap generation do.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from careerbridge.advice.models import (
    ImprovedProjects,
    MentorAnswer,
    ProfessionalSummary,
    ProfilePlatform,
    ProfileSuggestions,
    ProjectsPayload,
    SuggestionsPayload,
    SummaryPayload,
)
from careerbridge.ai.client import AIClient
from careerbridge.ai.config import AIConfig, get_ai_config
from careerbridge.ai.parsing import parse_json_object
from careerbridge.ai.prompts import (
    build_mentor_prompt,
    build_professional_summary_prompt,
    build_profile_suggestions_prompt,
    build_project_improvement_prompt,
)
from careerbridge.config.settings import AIProvider, Settings, get_settings
from careerbridge.errors import InvalidInput, MalformedAiResponse, NotFound, logged
from careerbridge.storage.models import AIExtractionRecord, User
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.validation import parse_choice

logger = logging.getLogger(__name__)

MENTOR_TYPE = "career_mentor"
SUGGESTIONS_TYPE = "profile_suggestions"
SUMMARY_TYPE = "professional_summary"
PROJECTS_TYPE = "project_descriptions"

MAX_QUESTION_LENGTH = 2000
MAX_PROJECTS = 10


class AdviceService:
    """Career mentor answers and profile-writing help."""

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

    async def _load_user(self, user_id: str) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        return user

    async def _audit(
        self,
        user_id: str,
        extraction_type: str,
        provider: AIProvider,
        input_text: str,
        raw_output: str,
        parsed: dict | None,
        status: str,
    ) -> int:
        return await self.repository.insert_ai_extraction(
            AIExtractionRecord(
                user_id=user_id,
                extraction_type=extraction_type,
                provider=provider.value,
                input_text=input_text,
                raw_output=raw_output,
                extracted_data=parsed,
                status=status,
            )
        )

    async def _ask_for_json(
        self,
        *,
        user_id: str,
        extraction_type: str,
        prompt: str,
        input_text: str,
        provider: AIProvider,
        payload_model: type[BaseModel],
        context: dict | None = None,
    ) -> tuple[int, Any]:
        """Invoke the provider, validate its JSON and audit the attempt.

        Returns:
            ``(audit_id, payload)``.

        Raises:
            UpstreamUnavailable: The provider call failed (nothing is audited).
            MalformedAiResponse: The output did not fit ``payload_model``.
        """
        raw_output = await self.ai_client.invoke(
            prompt, provider, temperature=self.ai_config.advice_temperature
        )

        parsed = None
        error: MalformedAiResponse | None = None
        try:
            parsed = parse_json_object(raw_output)
            payload = payload_model.model_validate(parsed, context=context)
        except MalformedAiResponse as e:
            error = e
        except ValidationError as e:
            error = MalformedAiResponse(
                f"AI response does not match the {extraction_type} schema: {e}",
                raw_response=raw_output,
                original_error=e,
            )

        audit_id = await self._audit(
            user_id,
            extraction_type,
            provider,
            input_text,
            raw_output,
            parsed,
            "malformed" if error is not None else "success",
        )
        if error is not None:
            raise logged(logger, error)
        return audit_id, payload

    async def ask_mentor(
        self,
        user_id: str,
        question: str,
        provider: AIProvider | str | None = None,
    ) -> MentorAnswer:
        """Answer a free-text career question in the context of the user's profile.

        Raises:
            InvalidInput: Blank or overlong question, or unknown provider.
            NotFound: Unknown user.
            UpstreamUnavailable: The provider call failed.
            MalformedAiResponse: The provider answered with blank text.
        """
        text = question.strip() if isinstance(question, str) else ""
        if not text:
            raise logged(logger, InvalidInput("question is required"))
        if len(text) > MAX_QUESTION_LENGTH:
            raise logged(
                logger,
                InvalidInput(f"question must be at most {MAX_QUESTION_LENGTH} characters"),
            )
        resolved = self._resolve_provider(provider)
        user = await self._load_user(user_id)

        logger.info("Asking career mentor for user %s via %s", user_id, resolved.value)
        answer = await self.ai_client.invoke(
            build_mentor_prompt(text, user),
            resolved,
            temperature=self.ai_config.advice_temperature,
            json_mode=False,
        )
        answer = answer.strip()
        if not answer:
            await self._audit(user_id, MENTOR_TYPE, resolved, text, answer, None, "malformed")
            raise logged(
                logger, MalformedAiResponse("AI mentor returned an empty answer", answer)
            )
        audit_id = await self._audit(
            user_id, MENTOR_TYPE, resolved, text, answer, {"answer": answer}, "success"
        )
        return MentorAnswer(
            question=text, answer=answer, provider=resolved.value, audit_id=audit_id
        )

    async def suggest_profile_improvements(
        self,
        user_id: str,
        platform: ProfilePlatform | str = ProfilePlatform.LINKEDIN,
        provider: AIProvider | str | None = None,
    ) -> ProfileSuggestions:
        """Suggest concrete improvements to the user's public profile."""
        try:
            resolved_platform = parse_choice(ProfilePlatform, platform, "platform")
        except InvalidInput as e:
            raise logged(logger, e) from None
        resolved_platform = resolved_platform or ProfilePlatform.LINKEDIN
        resolved = self._resolve_provider(provider)
        user = await self._load_user(user_id)

        logger.info(
            "Requesting %s profile suggestions for user %s via %s",
            resolved_platform.value,
            user_id,
            resolved.value,
        )
        audit_id, payload = await self._ask_for_json(
            user_id=user_id,
            extraction_type=SUGGESTIONS_TYPE,
            prompt=build_profile_suggestions_prompt(resolved_platform.value, user),
            input_text=resolved_platform.value,
            provider=resolved,
            payload_model=SuggestionsPayload,
        )
        return ProfileSuggestions(
            platform=resolved_platform,
            provider=resolved.value,
            audit_id=audit_id,
            suggestions=payload.suggestions,
        )

    async def generate_professional_summary(
        self,
        user_id: str,
        provider: AIProvider | str | None = None,
    ) -> ProfessionalSummary:
        """Write a short CV / LinkedIn summary from the user's profile."""
        resolved = self._resolve_provider(provider)
        user = await self._load_user(user_id)
        if not user.skills and not user.target_roles:
            raise logged(
                logger,
                InvalidInput("Add skills or target roles before generating a summary"),
            )

        logger.info("Generating professional summary for user %s", user_id)
        audit_id, payload = await self._ask_for_json(
            user_id=user_id,
            extraction_type=SUMMARY_TYPE,
            prompt=build_professional_summary_prompt(user),
            input_text=", ".join(user.skills),
            provider=resolved,
            payload_model=SummaryPayload,
        )
        return ProfessionalSummary(
            summary=payload.summary, provider=resolved.value, audit_id=audit_id
        )

    async def improve_project_descriptions(
        self,
        user_id: str,
        projects: Sequence[str],
        provider: AIProvider | str | None = None,
    ) -> ImprovedProjects:
        """Rewrite project descriptions for a CV, one output per input, same order.

        Raises:
            InvalidInput: No projects, a blank or non-text project, too many
                projects, or an unknown provider.
            NotFound: Unknown user.
            UpstreamUnavailable: The provider call failed.
            MalformedAiResponse: The provider returned a different number of
                descriptions or none at all.
        """
        if isinstance(projects, str) or not isinstance(projects, Sequence):
            raise logged(logger, InvalidInput("projects must be a list of descriptions"))
        cleaned = [p.strip() if isinstance(p, str) else "" for p in projects]
        if not cleaned or not all(cleaned):
            raise logged(
                logger, InvalidInput("projects must be non-blank descriptions")
            )
        if len(cleaned) > MAX_PROJECTS:
            raise logged(
                logger, InvalidInput(f"At most {MAX_PROJECTS} projects per request")
            )
        resolved = self._resolve_provider(provider)
        user = await self._load_user(user_id)

        logger.info(
            "Improving %s project description(s) for user %s", len(cleaned), user_id
        )
        audit_id, payload = await self._ask_for_json(
            user_id=user_id,
            extraction_type=PROJECTS_TYPE,
            prompt=build_project_improvement_prompt(cleaned, user),
            input_text="\n".join(cleaned),
            provider=resolved,
            payload_model=ProjectsPayload,
            context={"expected": len(cleaned)},
        )
        return ImprovedProjects(
            original=cleaned,
            improved=payload.improved_projects,
            provider=resolved.value,
            audit_id=audit_id,
        )
