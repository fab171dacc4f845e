"""Record types persisted by the CareerBridge repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from careerbridge.utils.validation import optional_int, optional_text, text_items

DEFAULT_JOB_APPLICATION_TIMING = "Apply after completing 60-70% of the roadmap"


class ExperienceLevel(str, Enum):
    """Experience level tag on users and job postings."""

    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class JobType(str, Enum):
    """Employment type tag on job postings."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class ResourceCost(str, Enum):
    """Whether a learning resource is free or paid."""

    FREE = "free"
    PAID = "paid"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class User:
    """A user's profile as seen by the core.

    ``skills`` and ``target_roles`` keep the user's own casing and insertion
    order for display; matching always goes through the SkillSet normalizer.
    """

    id: str
    full_name: str = ""
    email: str | None = None
    skills: list[str] = field(default_factory=list)
    target_roles: list[str] = field(default_factory=list)
    experience_level: ExperienceLevel | None = None
    onboarding_completed: bool = False
    raw_cv_text: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Serialize the user to a dictionary (raw CV text omitted)."""
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "skills": list(self.skills),
            "target_roles": list(self.target_roles),
            "experience_level": self.experience_level.value
            if self.experience_level
            else None,
            "onboarding_completed": self.onboarding_completed,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> User:
        """Build a user from import data."""
        level = data.get("experience_level")
        return cls(
            id=str(data["id"]),
            full_name=data.get("full_name", ""),
            email=data.get("email"),
            skills=list(data.get("skills") or []),
            target_roles=list(data.get("target_roles") or []),
            experience_level=ExperienceLevel(level) if level else None,
            onboarding_completed=bool(data.get("onboarding_completed", False)),
        )


@dataclass
class JobPosting:
    """A job posting. Read-only from the matching engine's perspective."""

    id: int | None
    title: str
    company: str
    required_skills: list[str] = field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.ENTRY
    job_type: JobType = JobType.FULL_TIME
    location: str | None = None
    description: str = ""
    salary_min: int | None = None
    salary_max: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "required_skills": list(self.required_skills),
            "experience_level": self.experience_level.value,
            "job_type": self.job_type.value,
            "location": self.location,
            "description": self.description,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
        }

    @classmethod
    def from_dict(cls, data: dict) -> JobPosting:
        return cls(
            id=data.get("id"),
            title=data["title"],
            company=data["company"],
            required_skills=list(data.get("required_skills") or []),
            experience_level=ExperienceLevel(data.get("experience_level", "entry")),
            job_type=JobType(data.get("job_type", "full_time")),
            location=data.get("location"),
            description=data.get("description", ""),
            salary_min=data.get("salary_min"),
            salary_max=data.get("salary_max"),
        )


@dataclass
class LearningResource:
    """A course, tutorial or book that teaches ``related_skills``."""

    id: int | None
    title: str
    related_skills: list[str] = field(default_factory=list)
    cost: ResourceCost = ResourceCost.FREE
    platform: str | None = None
    url: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "related_skills": list(self.related_skills),
            "cost": self.cost.value,
            "platform": self.platform,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LearningResource:
        return cls(
            id=data.get("id"),
            title=data["title"],
            related_skills=list(data.get("related_skills") or []),
            cost=ResourceCost(data.get("cost", "free")),
            platform=data.get("platform"),
            url=data.get("url"),
        )


@dataclass
class ExtractedSkillRecord:
    """One AI-extracted skill; unique on (user_id, skill_name).

    ``skill_name`` is the canonical (trimmed, lower-cased) name and
    ``display_name`` keeps the casing the provider returned first.
    """

    user_id: str
    skill_name: str
    display_name: str
    proficiency: str | None = None
    category: str | None = None
    source: str = "ai_extraction"
    is_verified: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "skill_name": self.skill_name,
            "display_name": self.display_name,
            "proficiency": self.proficiency,
            "category": self.category,
            "source": self.source,
            "is_verified": self.is_verified,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class AIExtractionRecord:
    """Append-only audit entry for one AI provider call."""

    user_id: str
    extraction_type: str
    provider: str
    input_text: str
    raw_output: str
    extracted_data: dict[str, Any] | None
    status: str
    id: int | None = None
    created_at: datetime | None = None


# --- Roadmap content -----------------------------------------------------
#
# Roadmap structure is validated once, here, before it is persisted. Every
# phase must carry at least one topic. The enrichment fields around the
# topics are coerced rather than checked: scalars become text, odd shapes
# fall back to empty defaults.


class RoadmapPhase(BaseModel):
    """One stage of a career roadmap."""

    model_config = ConfigDict(extra="ignore")

    phase: int = Field(..., ge=1, description="1-based phase number")
    title: str = Field(default="", description="Phase title")
    topics: list[str] = Field(..., min_length=1, description="Topics to learn")
    duration: str | None = Field(default=None, description="Estimated duration")
    timeline: str | None = Field(default=None, description="Calendar placement")
    technologies: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    learning_goals: list[str] = Field(default_factory=list)

    @field_validator("topics")
    @classmethod
    def strip_blank_topics(cls, v: list[str]) -> list[str]:
        topics = [topic.strip() for topic in v if topic and topic.strip()]
        if not topics:
            raise ValueError("phase topics must contain at least one non-blank topic")
        return topics

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v: object) -> str:
        return optional_text(v) or ""

    @field_validator("duration", "timeline", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str | None:
        return optional_text(v)

    @field_validator("technologies", "resources", "learning_goals", mode="before")
    @classmethod
    def coerce_lists(cls, v: object) -> list[str]:
        return text_items(v)


class ProjectSuggestion(BaseModel):
    """A portfolio project recommended alongside the roadmap."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    estimated_hours: int | None = None
    recommended_phase: int | None = None

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: object) -> str:
        return optional_text(v) or ""

    @field_validator("difficulty", mode="before")
    @classmethod
    def coerce_difficulty(cls, v: object) -> str | None:
        return optional_text(v)

    @field_validator("technologies", mode="before")
    @classmethod
    def coerce_technologies(cls, v: object) -> list[str]:
        return text_items(v)

    @field_validator("estimated_hours", "recommended_phase", mode="before")
    @classmethod
    def coerce_whole_number(cls, v: object) -> int | None:
        """Ranges such as "20-30" carry no single number and are dropped."""
        return optional_int(v)


class RoadmapContent(BaseModel):
    """Validated structure of an AI-generated roadmap."""

    model_config = ConfigDict(extra="ignore")

    stack_name: str | None = None
    prerequisites: list[str] = Field(default_factory=list)
    estimated_duration: str | None = None
    difficulty: str | None = None
    phases: list[RoadmapPhase] = Field(..., min_length=1)
    project_suggestions: list[ProjectSuggestion] = Field(default_factory=list)
    job_application_timing: str = DEFAULT_JOB_APPLICATION_TIMING

    @model_validator(mode="before")
    @classmethod
    def number_phases(cls, data: Any) -> Any:
        """Fill in missing phase numbers from each phase's position."""
        if not isinstance(data, dict):
            return data
        phases = data.get("phases")
        if not isinstance(phases, list):
            return data
        numbered = []
        for idx, phase in enumerate(phases, start=1):
            if isinstance(phase, dict) and phase.get("phase") is None:
                phase = {**phase, "phase": idx}
            numbered.append(phase)
        return {**data, "phases": numbered}

    @field_validator("stack_name", "estimated_duration", "difficulty", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str | None:
        return optional_text(v)

    @field_validator("prerequisites", mode="before")
    @classmethod
    def coerce_prerequisites(cls, v: object) -> list[str]:
        return text_items(v)

    @field_validator("project_suggestions", mode="before")
    @classmethod
    def keep_titled_projects(cls, v: object) -> list:
        """Suggestions without a usable title are dropped."""
        if not isinstance(v, list):
            return []
        projects = []
        for item in v:
            if isinstance(item, ProjectSuggestion):
                projects.append(item)
            elif isinstance(item, dict) and (title := optional_text(item.get("title"))):
                projects.append({**item, "title": title})
        return projects

    @field_validator("job_application_timing", mode="before")
    @classmethod
    def default_timing(cls, v: object) -> str:
        return optional_text(v) or DEFAULT_JOB_APPLICATION_TIMING

    @property
    def phase_numbers(self) -> set[int]:
        return {phase.phase for phase in self.phases}


@dataclass
class CareerRoadmap:
    """A persisted roadmap owned by exactly one user."""

    id: int
    user_id: str
    title: str
    target_role: str
    content: RoadmapContent
    ai_provider: str
    timeframe_months: int | None = None
    learning_hours_per_week: int | None = None
    current_skills: list[str] = field(default_factory=list)
    progress_percentage: int = 0
    completed_phases: set[int] = field(default_factory=set)
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Serialize the roadmap for callers (phases as plain data)."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "target_role": self.target_role,
            "roadmap": self.content.model_dump(mode="json"),
            "ai_provider": self.ai_provider,
            "timeframe_months": self.timeframe_months,
            "learning_hours_per_week": self.learning_hours_per_week,
            "current_skills": list(self.current_skills),
            "project_suggestions": [
                p.model_dump(mode="json") for p in self.content.project_suggestions
            ],
            "job_application_timing": self.content.job_application_timing,
            "progress_percentage": self.progress_percentage,
            "completed_phases": sorted(self.completed_phases),
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
