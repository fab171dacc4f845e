"""Tests for the roadmap lifecycle service."""

import json

import pytest

from careerbridge.errors import InvalidInput, MalformedAiResponse, NotFound
from careerbridge.roadmap.service import RoadmapService


@pytest.fixture
def make_service(repo, settings, ai_config, stub_ai_client):
    def _make(response="{}", error=None):
        client = stub_ai_client(response, error=error)
        return RoadmapService(repo, client, settings=settings, ai_config=ai_config), client

    return _make


@pytest.fixture
async def owned_roadmap(make_service, add_user, sample_roadmap):
    await add_user("owner", skills=["Python"])
    await add_user("intruder")
    service, _ = make_service()
    roadmap = await service.create_roadmap(
        "owner",
        " Backend Developer ",
        sample_roadmap,
        provider="gemini",
        timeframe_months=6,
        learning_hours_per_week=10,
        current_skills=["Python"],
    )
    return service, roadmap


class TestCreateRoadmap:
    @pytest.mark.asyncio
    async def test_persists_with_zero_progress(self, owned_roadmap):
        service, roadmap = owned_roadmap

        assert roadmap.title == "Roadmap to Backend Developer"
        assert roadmap.target_role == "Backend Developer"
        assert roadmap.progress_percentage == 0
        assert roadmap.completed_phases == set()
        assert roadmap.notes is None
        assert await service.get_roadmap(roadmap.id, "owner") == roadmap

    @pytest.mark.asyncio
    async def test_invalid_content_is_not_persisted(
        self, repo, make_service, add_user, sample_roadmap
    ):
        await add_user("owner")
        sample_roadmap["phases"][0]["topics"] = []
        service, _ = make_service()

        with pytest.raises(InvalidInput):
            await service.create_roadmap("owner", "SRE", sample_roadmap)
        assert await repo.list_roadmaps("owner") == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, make_service, sample_roadmap):
        service, _ = make_service()
        with pytest.raises(NotFound):
            await service.create_roadmap("ghost", "SRE", sample_roadmap)

    @pytest.mark.asyncio
    async def test_blank_role(self, make_service, add_user, sample_roadmap):
        await add_user("owner")
        service, _ = make_service()
        with pytest.raises(InvalidInput, match="target_role"):
            await service.create_roadmap("owner", "  ", sample_roadmap)


class TestGenerateRoadmap:
    @pytest.mark.asyncio
    async def test_generates_and_persists(self, repo, make_service, add_user, sample_roadmap):
        await add_user("owner", skills=["Python", "python", "SQL"])
        service, client = make_service(
            response="Here you go:\n" + json.dumps(sample_roadmap)
        )

        roadmap = await service.generate_roadmap(
            "owner", "Data Engineer", timeframe_months=3, provider="groq"
        )

        assert roadmap.ai_provider == "groq"
        assert roadmap.timeframe_months == 3
        assert roadmap.learning_hours_per_week == 10
        assert roadmap.current_skills == ["Python", "SQL"]
        assert len(roadmap.content.phases) == 2

        call = client.calls[0]
        assert "Data Engineer" in call["prompt"]
        assert "Python, SQL" in call["prompt"]
        assert call["temperature"] == 0.7

        [entry] = await repo.list_ai_extractions("owner")
        assert entry.extraction_type == "career_roadmap"
        assert entry.status == "success"

    @pytest.mark.asyncio
    async def test_current_skills_can_be_left_out(self, make_service, add_user, sample_roadmap):
        await add_user("owner", skills=["Python"])
        service, client = make_service(response=json.dumps(sample_roadmap))

        roadmap = await service.generate_roadmap(
            "owner", "Data Engineer", include_current_skills=False
        )

        assert roadmap.current_skills == []
        assert "Current skills" not in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_phase_without_topics_is_malformed(
        self, repo, make_service, add_user, sample_roadmap
    ):
        await add_user("owner")
        sample_roadmap["phases"][1]["topics"] = []
        service, _ = make_service(response=json.dumps(sample_roadmap))

        with pytest.raises(MalformedAiResponse):
            await service.generate_roadmap("owner", "Data Engineer")

        assert await repo.list_roadmaps("owner") == []
        [entry] = await repo.list_ai_extractions("owner")
        assert entry.status == "malformed"

    @pytest.mark.asyncio
    async def test_loose_enrichment_fields_are_saved(
        self, repo, make_service, add_user, sample_roadmap
    ):
        await add_user("owner")
        sample_roadmap["phases"][0]["duration"] = 4
        sample_roadmap["project_suggestions"][0]["estimated_hours"] = "20-30"
        service, _ = make_service(response=json.dumps(sample_roadmap))

        roadmap = await service.generate_roadmap("owner", "Data Engineer")

        assert roadmap.content.phases[0].duration == "4"
        assert roadmap.content.project_suggestions[0].estimated_hours is None
        assert [r.id for r in await repo.list_roadmaps("owner")] == [roadmap.id]
        [entry] = await repo.list_ai_extractions("owner")
        assert entry.status == "success"

    @pytest.mark.asyncio
    async def test_unparseable_output_is_malformed(self, repo, make_service, add_user):
        await add_user("owner")
        service, _ = make_service(response="Sorry, I can't do that.")

        with pytest.raises(MalformedAiResponse):
            await service.generate_roadmap("owner", "Data Engineer")
        assert await repo.list_roadmaps("owner") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"timeframe_months": 0},
            {"timeframe_months": 25},
            {"learning_hours_per_week": 0},
            {"provider": "openai"},
        ],
    )
    async def test_invalid_request_never_calls_provider(
        self, make_service, add_user, kwargs
    ):
        await add_user("owner")
        service, client = make_service()

        with pytest.raises(InvalidInput):
            await service.generate_roadmap("owner", "Data Engineer", **kwargs)
        assert client.calls == []


class TestUpdateProgress:
    @pytest.mark.asyncio
    async def test_replaces_progress_fields(self, owned_roadmap):
        service, roadmap = owned_roadmap

        updated = await service.update_progress(
            roadmap.id, "owner", 40, completed_phases=[1], notes="Halfway through"
        )
        assert updated.progress_percentage == 40
        assert updated.completed_phases == {1}
        assert updated.notes == "Halfway through"
        assert updated.updated_at >= roadmap.updated_at

        replaced = await service.update_progress(roadmap.id, "owner", 10)
        assert replaced.completed_phases == set()
        assert replaced.notes is None

    @pytest.mark.asyncio
    async def test_non_owner_gets_not_found_and_state_is_unchanged(
        self, repo, owned_roadmap
    ):
        service, roadmap = owned_roadmap
        await service.update_progress(roadmap.id, "owner", 30, [1], "mine")
        before = (await repo.get_roadmap(roadmap.id, "owner")).to_dict()

        with pytest.raises(NotFound):
            await service.update_progress(roadmap.id, "intruder", 100, [1, 2], "theirs")

        after = (await repo.get_roadmap(roadmap.id, "owner")).to_dict()
        assert json.dumps(after, sort_keys=True) == json.dumps(before, sort_keys=True)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("percentage", [-1, 101, True, 50.5, "50"])
    async def test_invalid_percentage(self, owned_roadmap, percentage):
        service, roadmap = owned_roadmap
        with pytest.raises(InvalidInput):
            await service.update_progress(roadmap.id, "owner", percentage)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("phases", [[0], [-2], [True], ["1"]])
    async def test_invalid_phases(self, owned_roadmap, phases):
        service, roadmap = owned_roadmap
        with pytest.raises(InvalidInput):
            await service.update_progress(roadmap.id, "owner", 10, phases)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("phases", [5, "12"])
    async def test_phases_must_be_a_collection(self, owned_roadmap, phases):
        service, roadmap = owned_roadmap
        with pytest.raises(InvalidInput):
            await service.update_progress(roadmap.id, "owner", 10, phases)

    @pytest.mark.asyncio
    async def test_none_phases_clear_completed_phases(self, owned_roadmap):
        service, roadmap = owned_roadmap
        await service.update_progress(roadmap.id, "owner", 50, completed_phases=[1, 2])

        updated = await service.update_progress(
            roadmap.id, "owner", 20, completed_phases=None
        )

        assert updated.completed_phases == set()
        assert updated.progress_percentage == 20

    @pytest.mark.asyncio
    async def test_boundaries_accepted(self, owned_roadmap):
        service, roadmap = owned_roadmap

        assert (await service.update_progress(roadmap.id, "owner", 0)).progress_percentage == 0
        assert (
            await service.update_progress(roadmap.id, "owner", 100)
        ).progress_percentage == 100


class TestReadAndDelete:
    @pytest.mark.asyncio
    async def test_other_users_cannot_see_roadmap(self, owned_roadmap):
        service, roadmap = owned_roadmap

        with pytest.raises(NotFound):
            await service.get_roadmap(roadmap.id, "intruder")
        assert await service.list_roadmaps("intruder") == []

    @pytest.mark.asyncio
    async def test_delete_by_non_owner(self, owned_roadmap):
        service, roadmap = owned_roadmap

        with pytest.raises(NotFound):
            await service.delete_roadmap(roadmap.id, "intruder")
        assert await service.get_roadmap(roadmap.id, "owner")

    @pytest.mark.asyncio
    async def test_delete_by_owner(self, owned_roadmap):
        service, roadmap = owned_roadmap

        await service.delete_roadmap(roadmap.id, "owner")

        with pytest.raises(NotFound):
            await service.get_roadmap(roadmap.id, "owner")
        with pytest.raises(NotFound):
            await service.delete_roadmap(roadmap.id, "owner")
