"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from careerbridge.ai.config import AIConfig, reset_ai_config
from careerbridge.config.settings import Settings, reset_settings
from careerbridge.storage.models import JobPosting, LearningResource, User
from careerbridge.storage.repository import CareerRepository
from careerbridge.utils.logging import reset_logging


class StubAIClient:
    """Stands in for ``AIClient`` and returns canned responses."""

    def __init__(self, response: str | Callable[[str], str] = "{}", error=None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def invoke(self, prompt, provider, *, temperature=None, json_mode=True):
        self.calls.append(
            {
                "prompt": prompt,
                "provider": provider,
                "temperature": temperature,
                "json_mode": json_mode,
            }
        )
        if self.error is not None:
            raise self.error
        if callable(self.response):
            return self.response(prompt)
        return self.response


SAMPLE_ROADMAP = {
    "stack_name": "Backend Development",
    "prerequisites": ["Basic programming"],
    "estimated_duration": "6 months",
    "difficulty": "intermediate",
    "phases": [
        {
            "phase": 1,
            "title": "Foundations",
            "topics": ["HTTP basics", "SQL fundamentals"],
            "technologies": ["Python"],
        },
        {
            "phase": 2,
            "title": "APIs",
            "topics": ["REST design"],
            "learning_goals": ["Ship a CRUD API"],
        },
    ],
    "project_suggestions": [
        {"title": "Todo API", "technologies": ["FastAPI"], "recommended_phase": 2}
    ],
}


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Keep configuration singletons and logging from leaking between tests."""
    reset_settings()
    reset_ai_config()
    yield
    reset_settings()
    reset_ai_config()
    reset_logging()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, database_path=tmp_path / "careerbridge.db")


@pytest.fixture
def ai_config() -> AIConfig:
    return AIConfig(_env_file=None, gemini_api_key="test-gemini", groq_api_key="test-groq")


@pytest.fixture
async def repo(settings):
    """An initialized repository on a temporary database."""
    repository = CareerRepository(settings.database_path)
    await repository.initialize()
    yield repository
    await repository.close()


@pytest.fixture
def add_user(repo):
    async def _add(user_id: str = "user-1", skills=(), target_roles=(), **kwargs) -> User:
        return await repo.insert_user(
            User(
                id=user_id,
                full_name=kwargs.pop("full_name", "Test User"),
                skills=list(skills),
                target_roles=list(target_roles),
                **kwargs,
            )
        )

    return _add


@pytest.fixture
def add_job(repo):
    async def _add(title: str = "Developer", required_skills=(), **kwargs) -> JobPosting:
        return await repo.insert_job(
            JobPosting(
                id=None,
                title=title,
                company=kwargs.pop("company", "Acme"),
                required_skills=list(required_skills),
                **kwargs,
            )
        )

    return _add


@pytest.fixture
def add_resource(repo):
    async def _add(title: str = "Course", related_skills=(), **kwargs) -> LearningResource:
        return await repo.insert_resource(
            LearningResource(
                id=None, title=title, related_skills=list(related_skills), **kwargs
            )
        )

    return _add


@pytest.fixture
def stub_ai_client() -> type[StubAIClient]:
    return StubAIClient


@pytest.fixture
def sample_roadmap() -> dict:
    return json.loads(json.dumps(SAMPLE_ROADMAP))
