"""Data models for profile-aware career advice."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from careerbridge.utils.validation import optional_text


class ProfilePlatform(str, Enum):
    """Where the profile being improved is published."""

    LINKEDIN = "linkedin"
    GITHUB = "github"
    PORTFOLIO = "portfolio"


class ProfileSuggestion(BaseModel):
    """One improvement suggestion for a public profile."""

    model_config = ConfigDict(extra="ignore")

    category: str = Field(default="general", description="Profile area, e.g. headline")
    suggestion: str = Field(..., min_length=1)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: object) -> str:
        return optional_text(v) or "general"

    @field_validator("suggestion", mode="before")
    @classmethod
    def coerce_suggestion(cls, v: object) -> object:
        return optional_text(v) or v


class SuggestionsPayload(BaseModel):
    """Provider output for profile suggestions."""

    model_config = ConfigDict(extra="ignore")

    suggestions: list[ProfileSuggestion] = Field(..., min_length=1)

    @field_validator("suggestions", mode="before")
    @classmethod
    def keep_usable_items(cls, v: object) -> object:
        """Plain strings count as uncategorized suggestions; blanks are dropped."""
        if not isinstance(v, list):
            return v
        items = []
        for item in v:
            if isinstance(item, str):
                item = {"suggestion": item}
            if isinstance(item, dict) and optional_text(item.get("suggestion")):
                items.append(item)
        return items


class SummaryPayload(BaseModel):
    """Provider output for a professional summary."""

    model_config = ConfigDict(extra="ignore")

    summary: str = Field(..., min_length=1)

    @field_validator("summary", mode="before")
    @classmethod
    def strip_summary(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class ProjectsPayload(BaseModel):
    """Provider output for rewritten project descriptions."""

    model_config = ConfigDict(extra="ignore")

    improved_projects: list[str] = Field(..., min_length=1)

    @field_validator("improved_projects")
    @classmethod
    def one_description_per_project(cls, v: list[str], info: ValidationInfo) -> list[str]:
        """Pass ``context={"expected": n}`` to require exactly ``n`` descriptions."""
        descriptions = [item.strip() for item in v]
        if not all(descriptions):
            raise ValueError("improved project descriptions must not be blank")
        expected = (info.context or {}).get("expected")
        if expected is not None and len(descriptions) != expected:
            raise ValueError(f"expected {expected} description(s), got {len(descriptions)}")
        return descriptions


@dataclass
class MentorAnswer:
    """A mentor's answer to one career question."""

    question: str
    answer: str
    provider: str
    audit_id: int

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "answer": self.answer,
            "provider": self.provider,
            "audit_id": self.audit_id,
        }


@dataclass
class ProfileSuggestions:
    """Suggestions for improving the user's profile on one platform."""

    platform: ProfilePlatform
    provider: str
    audit_id: int
    suggestions: list[ProfileSuggestion] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "provider": self.provider,
            "audit_id": self.audit_id,
            "suggestions": [s.model_dump() for s in self.suggestions],
        }


@dataclass
class ProfessionalSummary:
    summary: str
    provider: str
    audit_id: int

    def to_dict(self) -> dict:
        return {"summary": self.summary, "provider": self.provider, "audit_id": self.audit_id}


@dataclass
class ImprovedProjects:
    """Rewritten project descriptions, index-aligned with the originals."""

    original: list[str]
    improved: list[str]
    provider: str
    audit_id: int

    def to_dict(self) -> dict:
        return {
            "projects": [
                {"original": before, "improved": after}
                for before, after in zip(self.original, self.improved, strict=True)
            ],
            "provider": self.provider,
            "audit_id": self.audit_id,
        }
