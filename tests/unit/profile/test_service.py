"""Tests for ProfileService."""

import pytest

from careerbridge.errors import InvalidInput, NotFound
from careerbridge.profile.service import ProfileService
from careerbridge.storage.models import ExperienceLevel


@pytest.fixture
def service(repo):
    return ProfileService(repo)


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_replaces_supplied_fields(self, service, add_user):
        await add_user(skills=["Go"], target_roles=["SRE"])

        user = await service.update_profile(
            "user-1", skills=[" Python ", "python", "", "SQL"], experience_level="MID"
        )

        assert user.skills == ["Python", "SQL"]
        assert user.target_roles == ["SRE"]
        assert user.experience_level == ExperienceLevel.MID
        assert (await service.get_profile("user-1")).skills == ["Python", "SQL"]

    @pytest.mark.asyncio
    async def test_onboarding_completes_with_skills_and_roles(self, service, add_user):
        await add_user()

        user = await service.update_profile("user-1", skills=["Python"])
        assert user.onboarding_completed is False

        user = await service.update_profile("user-1", target_roles=["Data Engineer"])
        assert user.onboarding_completed is True

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFound):
            await service.update_profile("ghost", skills=["Python"])
        with pytest.raises(NotFound):
            await service.get_profile("ghost")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"skills": "Python"},
            {"target_roles": [1, 2]},
            {"experience_level": "guru"},
        ],
    )
    async def test_invalid_input(self, service, add_user, kwargs):
        await add_user()
        with pytest.raises(InvalidInput):
            await service.update_profile("user-1", **kwargs)
