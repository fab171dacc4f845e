"""User profile reads and updates."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from careerbridge.errors import InvalidInput, NotFound, logged
from careerbridge.matching.skills import dedupe_skill_names
from careerbridge.storage.models import ExperienceLevel, User
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.validation import parse_choice

logger = logging.getLogger(__name__)


def _clean_names(values: Sequence[str] | None, field: str) -> list[str] | None:
    if values is None:
        return None
    if isinstance(values, str) or not all(isinstance(v, str) for v in values):
        raise logged(logger, InvalidInput(f"{field} must be a list of strings"))
    return dedupe_skill_names(values)


class ProfileService:
    """Read and update the profile fields the matching engine relies on."""

    def __init__(self, repository: CareerRepository) -> None:
        self.repository = repository

    async def get_profile(self, user_id: str) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        return user

    async def update_profile(
        self,
        user_id: str,
        skills: Sequence[str] | None = None,
        target_roles: Sequence[str] | None = None,
        experience_level: ExperienceLevel | str | None = None,
    ) -> User:
        """Replace the supplied profile fields; omitted fields are left alone.

        Onboarding is marked complete once the user has at least one skill
        and one target role. It is never reset.
        """
        new_skills = _clean_names(skills, "skills")
        new_roles = _clean_names(target_roles, "target_roles")
        try:
            level = parse_choice(ExperienceLevel, experience_level, "experience level")
        except InvalidInput as e:
            raise logged(logger, e) from None

        def apply(user: User) -> None:
            if new_skills is not None:
                user.skills = new_skills
            if new_roles is not None:
                user.target_roles = new_roles
            if level is not None:
                user.experience_level = level
            if user.skills and user.target_roles:
                user.onboarding_completed = True

        user = await self.repository.update_user(user_id, apply)
        if user is None:
            raise logged(logger, NotFound(f"User not found: {user_id}"))
        logger.info("Updated profile for user %s", user_id)
        return user
