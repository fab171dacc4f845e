"""Tests for the profile-aware advice service."""

import json

import pytest

from careerbridge.advice.models import ProfilePlatform
from careerbridge.advice.service import AdviceService
from careerbridge.config.settings import AIProvider
from careerbridge.errors import (
    InvalidInput,
    MalformedAiResponse,
    NotFound,
    UpstreamUnavailable,
)
from careerbridge.storage.models import ExperienceLevel


@pytest.fixture
def make_service(repo, settings, ai_config, stub_ai_client):
    def _make(response="{}", error=None):
        client = stub_ai_client(response, error=error)
        return AdviceService(repo, client, settings=settings, ai_config=ai_config), client

    return _make


@pytest.fixture
async def profile(add_user):
    return await add_user(
        skills=["Python", "SQL"],
        target_roles=["Data Engineer"],
        experience_level=ExperienceLevel.MID,
    )


class TestAskMentor:
    @pytest.mark.asyncio
    async def test_answer_is_grounded_on_profile(
        self, repo, make_service, ai_config, profile
    ):
        service, client = make_service(response="  Learn Airflow next.\n")

        answer = await service.ask_mentor("user-1", "  What should I learn next? ")

        assert answer.answer == "Learn Airflow next."
        assert answer.question == "What should I learn next?"
        call = client.calls[0]
        assert call["json_mode"] is False
        assert call["temperature"] == ai_config.advice_temperature
        assert "Skills: Python, SQL" in call["prompt"]
        assert "Target roles: Data Engineer" in call["prompt"]
        assert "Experience level: mid" in call["prompt"]

        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.id == answer.audit_id
        assert entry.extraction_type == "career_mentor"
        assert entry.extracted_data == {"answer": "Learn Airflow next."}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", ["", "   ", None, "x" * 2001])
    async def test_invalid_question_never_calls_provider(
        self, make_service, profile, question
    ):
        service, client = make_service(response="ok")

        with pytest.raises(InvalidInput):
            await service.ask_mentor("user-1", question)
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, make_service):
        service, client = make_service(response="ok")

        with pytest.raises(NotFound):
            await service.ask_mentor("ghost", "Anything?")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_blank_answer_is_malformed(self, repo, make_service, profile):
        service, _ = make_service(response="   ")

        with pytest.raises(MalformedAiResponse):
            await service.ask_mentor("user-1", "Anything?")

        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.status == "malformed"

    @pytest.mark.asyncio
    async def test_provider_failure_is_not_audited(self, repo, make_service, profile):
        service, _ = make_service(error=UpstreamUnavailable("groq down"))

        with pytest.raises(UpstreamUnavailable):
            await service.ask_mentor("user-1", "Anything?", provider="groq")
        assert await repo.list_ai_extractions("user-1") == []


class TestProfileSuggestions:
    @pytest.mark.asyncio
    async def test_suggestions_are_parsed(self, repo, make_service, profile):
        response = "Here:\n" + json.dumps(
            {
                "suggestions": [
                    {"category": "headline", "suggestion": "Lead with Data Engineer"},
                    "Pin your best SQL project",
                    {"category": "about", "suggestion": "  "},
                ]
            }
        )
        service, client = make_service(response=response)

        result = await service.suggest_profile_improvements(
            "user-1", platform="GitHub", provider="groq"
        )

        assert result.platform == ProfilePlatform.GITHUB
        assert result.provider == "groq"
        assert [(s.category, s.suggestion) for s in result.suggestions] == [
            ("headline", "Lead with Data Engineer"),
            ("general", "Pin your best SQL project"),
        ]
        assert client.calls[0]["provider"] == AIProvider.GROQ
        assert "github profile" in client.calls[0]["prompt"]
        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.extraction_type == "profile_suggestions"
        assert entry.status == "success"

    @pytest.mark.asyncio
    async def test_defaults_to_linkedin(self, make_service, profile):
        service, _ = make_service(response=json.dumps({"suggestions": ["Add a photo"]}))

        result = await service.suggest_profile_improvements("user-1")

        assert result.platform == ProfilePlatform.LINKEDIN

    @pytest.mark.asyncio
    async def test_no_usable_suggestion_is_malformed(self, repo, make_service, profile):
        service, _ = make_service(response=json.dumps({"suggestions": []}))

        with pytest.raises(MalformedAiResponse):
            await service.suggest_profile_improvements("user-1")

        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.status == "malformed"
        assert entry.extracted_data == {"suggestions": []}

    @pytest.mark.asyncio
    async def test_unknown_platform(self, make_service, profile):
        service, client = make_service()

        with pytest.raises(InvalidInput):
            await service.suggest_profile_improvements("user-1", platform="myspace")
        assert client.calls == []


class TestProfessionalSummary:
    @pytest.mark.asyncio
    async def test_summary(self, repo, make_service, profile):
        service, _ = make_service(
            response=json.dumps({"summary": " Mid-level engineer moving into data. "})
        )

        result = await service.generate_professional_summary("user-1")

        assert result.summary == "Mid-level engineer moving into data."
        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.extraction_type == "professional_summary"

    @pytest.mark.asyncio
    async def test_empty_profile_is_rejected(self, make_service, add_user):
        await add_user()
        service, client = make_service()

        with pytest.raises(InvalidInput):
            await service.generate_professional_summary("user-1")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_unparseable_output(self, repo, make_service, profile):
        service, _ = make_service(response="I'd rather not.")

        with pytest.raises(MalformedAiResponse):
            await service.generate_professional_summary("user-1")
        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.status == "malformed"
        assert entry.extracted_data is None


class TestImproveProjects:
    @pytest.mark.asyncio
    async def test_descriptions_keep_input_order(self, repo, make_service, profile):
        improved = ["Built a Flask todo app with 100% test coverage", "Designed a SQL report"]
        service, client = make_service(response=json.dumps({"improved_projects": improved}))

        result = await service.improve_project_descriptions(
            "user-1", [" Built a todo app ", "Made a report"]
        )

        assert result.original == ["Built a todo app", "Made a report"]
        assert result.improved == improved
        assert "1. Built a todo app" in client.calls[0]["prompt"]
        assert "2. Made a report" in client.calls[0]["prompt"]
        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.extraction_type == "project_descriptions"
        assert entry.input_text == "Built a todo app\nMade a report"

    @pytest.mark.asyncio
    async def test_count_mismatch_is_malformed(self, repo, make_service, profile):
        service, _ = make_service(response=json.dumps({"improved_projects": ["Only one"]}))

        with pytest.raises(MalformedAiResponse):
            await service.improve_project_descriptions("user-1", ["First", "Second"])
        [entry] = await repo.list_ai_extractions("user-1")
        assert entry.status == "malformed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "projects",
        [[], ["ok", "  "], "Built a todo app", [1], ["p"] * 11],
        ids=["empty", "blank-item", "bare-string", "non-text", "too-many"],
    )
    async def test_invalid_projects_never_call_provider(
        self, make_service, profile, projects
    ):
        service, client = make_service()

        with pytest.raises(InvalidInput):
            await service.improve_project_descriptions("user-1", projects)
        assert client.calls == []
