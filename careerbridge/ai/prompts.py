"""Prompt builders for CV extraction, roadmaps and profile advice."""

from __future__ import annotations

import json
from collections.abc import Sequence

from careerbridge.storage.models import User

_CV_EXAMPLE = {
    "technical_skills": [
        {"name": "Python", "proficiency": "advanced", "category": "programming_language"},
        {"name": "React", "proficiency": "intermediate", "category": "framework"},
    ],
    "soft_skills": ["communication", "leadership"],
    "roles": ["Software Engineer"],
    "domains": ["Web Development"],
    "certifications": ["AWS Certified Cloud Practitioner"],
    "tools": ["Git", "Docker"],
    "years_of_experience": 3.5,
    "education": ["B.Sc. Computer Science"],
}

_ROADMAP_EXAMPLE = {
    "stack_name": "Full Stack Development",
    "prerequisites": ["Basic programming knowledge"],
    "estimated_duration": "6 months",
    "difficulty": "intermediate",
    "phases": [
        {
            "phase": 1,
            "title": "Fundamentals",
            "timeline": "Month 1",
            "duration": "4 weeks",
            "topics": ["JavaScript basics", "DOM manipulation"],
            "technologies": ["JavaScript", "HTML", "CSS"],
            "learning_goals": ["Build a static page with interactivity"],
            "resources": ["MDN Web Docs"],
        }
    ],
    "project_suggestions": [
        {
            "title": "Personal portfolio",
            "description": "A responsive site showcasing your projects",
            "technologies": ["HTML", "CSS", "JavaScript"],
            "difficulty": "beginner",
            "estimated_hours": 20,
            "recommended_phase": 1,
        }
    ],
    "job_application_timing": "Start applying after phase 3",
}


def build_cv_extraction_prompt(cv_text: str) -> str:
    """Build the prompt that asks a provider to extract skills from a CV."""
    return "\n".join(
        [
            "You are an expert CV/resume analyzer. Extract structured information "
            "from the CV text below.",
            "",
            "CV text:",
            cv_text,
            "",
            "Return a JSON object with exactly this structure:",
            json.dumps(_CV_EXAMPLE, indent=2),
            "",
            "Guidelines:",
            "- Extract ONLY what is explicitly mentioned or strongly implied.",
            "- technical_skills: programming languages, frameworks, libraries, databases.",
            "- Categories: programming_language, framework, library, database, cloud, "
            "devops, design_tool.",
            "- Proficiency: beginner, intermediate, advanced, expert (infer from context).",
            "- Return valid JSON only, with no additional text.",
        ]
    )


def build_roadmap_prompt(
    *,
    target_role: str,
    timeframe_months: int,
    learning_hours_per_week: int,
    current_skills: list[str] | None = None,
) -> str:
    """Build the prompt that asks a provider for a phased career roadmap."""
    lines = [
        "You are an expert career advisor and learning path designer. Create a "
        f"learning roadmap to become a {target_role}.",
        "",
        f"Timeframe: {timeframe_months} month(s), "
        f"{learning_hours_per_week} hour(s) of study per week.",
    ]
    if current_skills:
        lines.append(f"Current skills: {', '.join(current_skills)}")
    lines.extend(
        [
            "",
            "Return a JSON object with this structure:",
            json.dumps(_ROADMAP_EXAMPLE, indent=2),
            "",
            "Guidelines:",
            "- Create 4-6 phases with logical progression that fit the timeframe.",
            "- Every phase MUST have a non-empty list of specific, actionable topics.",
            "- Skip topics the user already knows; build on current skills.",
            "- Suggest 2-4 portfolio projects tied to phases.",
            "- Say when the user should start applying for jobs.",
            "- Return valid JSON only.",
        ]
    )
    return "\n".join(lines)


def build_profile_context(user: User) -> str:
    """Summarize the profile fields advice prompts are grounded on."""
    level = user.experience_level.value if user.experience_level else "Not specified"
    return "\n".join(
        [
            f"Skills: {', '.join(user.skills) or 'None listed'}",
            f"Target roles: {', '.join(user.target_roles) or 'Not specified'}",
            f"Experience level: {level}",
        ]
    )


def build_mentor_prompt(question: str, user: User) -> str:
    """Build the prompt for a free-text career question."""
    return "\n".join(
        [
            "You are an experienced career mentor for people moving into tech roles. "
            "Answer the question below for this person, concisely and practically.",
            "",
            build_profile_context(user),
            "",
            "Question:",
            question,
        ]
    )


def build_profile_suggestions_prompt(platform: str, user: User) -> str:
    """Build the prompt asking for profile improvement suggestions."""
    return "\n".join(
        [
            f"Provide 5 specific, actionable suggestions to improve a {platform} "
            "profile for a job seeker with this background:",
            "",
            build_profile_context(user),
            "",
            "Return a JSON object with this structure:",
            json.dumps(
                {"suggestions": [{"category": "headline", "suggestion": "..."}]},
                indent=2,
            ),
            "Return valid JSON only.",
        ]
    )


def build_professional_summary_prompt(user: User) -> str:
    """Build the prompt for a CV / LinkedIn professional summary."""
    return "\n".join(
        [
            "Write a professional summary for a CV or LinkedIn profile based on "
            "this background:",
            "",
            build_profile_context(user),
            "",
            "Write 2-3 engaging sentences that highlight key strengths, experience "
            "and career goals.",
            'Return a JSON object: {"summary": "..."}. Return valid JSON only.',
        ]
    )


def build_project_improvement_prompt(projects: Sequence[str], user: User) -> str:
    """Build the prompt that rewrites project descriptions for a CV."""
    lines = [
        "Improve these project descriptions for a professional CV. Use action "
        "verbs and quantifiable achievements where possible.",
        f"The author's skills: {', '.join(user.skills) or 'None listed'}",
        "",
        "Projects:",
    ]
    lines.extend(f"{idx}. {project}" for idx, project in enumerate(projects, start=1))
    lines.extend(
        [
            "",
            'Return a JSON object: {"improved_projects": ["...", "..."]} with exactly '
            f"{len(projects)} description(s) in the same order. Return valid JSON only.",
        ]
    )
    return "\n".join(lines)
