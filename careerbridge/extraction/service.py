"""Extract skills from CV text with an AI provider and merge them into a profile.

The flow is: prompt the provider, recover and validate the JSON it returns,
append an audit entry, then (optionally) upsert the technical skills and
extend the user's skill and target-role lists in one transaction.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from careerbridge.ai.client import AIClient
from careerbridge.ai.config import AIConfig, get_ai_config
from careerbridge.ai.parsing import parse_json_object
from careerbridge.ai.prompts import build_cv_extraction_prompt
from careerbridge.config.settings import AIProvider, Settings, get_settings
from careerbridge.errors import InvalidInput, MalformedAiResponse, NotFound, logged
from careerbridge.extraction.models import ExtractedData, ExtractionOutcome
from careerbridge.matching.skills import canonical_skill, merge_skill_names, to_skill_set
from careerbridge.storage.models import AIExtractionRecord, ExtractedSkillRecord, User
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.validation import parse_choice

logger = logging.getLogger(__name__)

EXTRACTION_TYPE = "cv_skills"


class ExtractionService:
    """AI extraction orchestrator for CV skills."""

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

    async def extract_and_merge(
        self,
        user_id: str,
        cv_text: str,
        provider: AIProvider | str | None = None,
        update_profile: bool = False,
    ) -> ExtractionOutcome:
        """Extract structured skills from ``cv_text`` and optionally merge them.

        Args:
            user_id: Authenticated user the CV belongs to.
            cv_text: Raw CV text.
            provider: "gemini" or "groq" (defaults to the configured provider).
            update_profile: Upsert extracted skills and extend the user's
                skill / target-role lists.

        Returns:
            The extracted data plus what was added to the profile.

        Raises:
            InvalidInput: Blank CV text or unknown provider.
            NotFound: Unknown user.
            UpstreamUnavailable: The provider call failed.
            MalformedAiResponse: The provider output could not be used.
        """
        if not isinstance(cv_text, str) or not cv_text.strip():
            raise logged(logger, InvalidInput("cv_text is required"))
        resolved = self._resolve_provider(provider)

        if await self.repository.get_user(user_id) is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))

        logger.info(
            "Extracting skills for user %s via %s (update_profile=%s)",
            user_id,
            resolved.value,
            update_profile,
        )
        raw_output = await self.ai_client.invoke(
            build_cv_extraction_prompt(cv_text),
            resolved,
            temperature=self.ai_config.extraction_temperature,
        )

        audit_id, data = await self._parse_and_audit(
            user_id=user_id,
            cv_text=cv_text,
            raw_output=raw_output,
            provider=resolved,
        )

        outcome = ExtractionOutcome(data=data, provider=resolved.value, audit_id=audit_id)
        if not update_profile:
            return outcome

        records = self._skill_records(user_id, data)
        added_skills: list[str] = []
        added_roles: list[str] = []

        def apply(user: User) -> None:
            known_skills = to_skill_set(user.skills)
            known_roles = to_skill_set(user.target_roles)
            skills = merge_skill_names(user.skills, (r.display_name for r in records))
            roles = merge_skill_names(user.target_roles, data.roles)
            added_skills.extend(s for s in skills if canonical_skill(s) not in known_skills)
            added_roles.extend(r for r in roles if canonical_skill(r) not in known_roles)
            user.skills = skills
            user.target_roles = roles
            user.raw_cv_text = cv_text

        updated = await self.repository.update_user(user_id, apply, records)
        if updated is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))

        logger.info(
            "Merged %s extracted skill(s) for user %s; %s new skill(s), %s new role(s)",
            len(records),
            user_id,
            len(added_skills),
            len(added_roles),
        )
        outcome.profile_updated = True
        outcome.added_skills = added_skills
        outcome.added_roles = added_roles
        return outcome

    async def _parse_and_audit(
        self,
        *,
        user_id: str,
        cv_text: str,
        raw_output: str,
        provider: AIProvider,
    ) -> tuple[int, ExtractedData]:
        """Parse provider output, recording the attempt in the audit log either way."""
        parsed = None
        error: MalformedAiResponse | None = None
        try:
            parsed = parse_json_object(raw_output)
            data = ExtractedData.model_validate(parsed)
        except MalformedAiResponse as e:
            error = e
        except ValidationError as e:
            error = MalformedAiResponse(
                f"AI response does not match the skill schema: {e}",
                raw_response=raw_output,
                original_error=e,
            )

        audit_id = await self.repository.insert_ai_extraction(
            AIExtractionRecord(
                user_id=user_id,
                extraction_type=EXTRACTION_TYPE,
                provider=provider.value,
                input_text=cv_text,
                raw_output=raw_output,
                extracted_data=parsed,
                status="malformed" if error is not None else "success",
            )
        )
        if error is not None:
            raise logged(logger, error)
        return audit_id, data

    def _skill_records(
        self, user_id: str, data: ExtractedData
    ) -> list[ExtractedSkillRecord]:
        """One record per canonical skill name; the first occurrence wins."""
        records: dict[str, ExtractedSkillRecord] = {}
        for skill in data.technical_skills:
            key = canonical_skill(skill.name)
            if not key or key in records:
                continue
            records[key] = ExtractedSkillRecord(
                user_id=user_id,
                skill_name=key,
                display_name=skill.name,
                proficiency=skill.proficiency,
                category=skill.category,
            )
        return list(records.values())

    async def list_extracted_skills(self, user_id: str) -> list[ExtractedSkillRecord]:
        """Return the user's extracted skills ordered by name."""
        if await self.repository.get_user(user_id) is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        return await self.repository.list_extracted_skills(user_id)
