"""Tests for prompt builders."""

from careerbridge.ai.prompts import (
    build_profile_context,
    build_project_improvement_prompt,
    build_roadmap_prompt,
)
from careerbridge.storage.models import User


class TestProfileContext:
    def test_empty_profile_uses_placeholders(self):
        context = build_profile_context(User(id="u"))

        assert "Skills: None listed" in context
        assert "Target roles: Not specified" in context
        assert "Experience level: Not specified" in context

    def test_project_prompt_states_expected_count(self):
        prompt = build_project_improvement_prompt(["a", "b", "c"], User(id="u", skills=["Go"]))

        assert "exactly 3 description(s)" in prompt
        assert "The author's skills: Go" in prompt


class TestRoadmapPrompt:
    def test_current_skills_are_optional(self):
        with_skills = build_roadmap_prompt(
            target_role="SRE", timeframe_months=3, learning_hours_per_week=5,
            current_skills=["Linux"],
        )
        without = build_roadmap_prompt(
            target_role="SRE", timeframe_months=3, learning_hours_per_week=5
        )

        assert "Current skills: Linux" in with_skills
        assert "Current skills" not in without
        assert "3 month(s), 5 hour(s)" in without
