"""Data models for AI skill extraction."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, field_validator

from careerbridge.utils.validation import optional_number, optional_text, text_items


class TechnicalSkill(BaseModel):
    """A technical skill found in a CV."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Skill name as written")
    proficiency: str | None = Field(
        default=None, description="beginner, intermediate, advanced or expert"
    )
    category: str | None = Field(
        default=None, description="programming_language, framework, database, ..."
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("proficiency", "category", mode="before")
    @classmethod
    def coerce_label(cls, v: object) -> str | None:
        return optional_text(v)


class ExtractedData(BaseModel):
    """Structured data a provider extracted from a CV.

    Only ``technical_skills`` and ``roles`` feed the profile merge. The other
    sections are informational, so values of an unexpected shape are
    replaced with empty defaults instead of failing the whole extraction.
    """

    model_config = ConfigDict(extra="ignore")

    technical_skills: list[TechnicalSkill] = Field(default_factory=list)
    soft_skills: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    years_of_experience: float | None = Field(default=None, ge=0)
    education: list[str] = Field(default_factory=list)

    @field_validator("technical_skills", mode="before")
    @classmethod
    def coerce_skill_items(cls, v: object) -> object:
        """Accept plain strings as well as ``{"name": ...}`` objects.

        Entries that are neither (or have a blank name) are dropped.
        """
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        items: list[dict] = []
        for item in v:
            if isinstance(item, str):
                item = {"name": item}
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if isinstance(name, str) and name.strip():
                items.append(item)
        return items

    @field_validator(
        "soft_skills", "roles", "domains", "certifications", "tools", "education",
        mode="before",
    )
    @classmethod
    def clean_string_lists(cls, v: object) -> list[str]:
        return text_items(v)

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def coerce_years(cls, v: object) -> float | None:
        years = optional_number(v)
        return years if years is not None and years >= 0 else None

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


@dataclass
class ExtractionOutcome:
    """Result of one extract-and-merge run."""

    data: ExtractedData
    provider: str
    audit_id: int
    profile_updated: bool = False
    added_skills: list[str] = field(default_factory=list)
    added_roles: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "extracted_data": self.data.to_dict(),
            "provider": self.provider,
            "audit_id": self.audit_id,
            "profile_updated": self.profile_updated,
            "added_skills": list(self.added_skills),
            "added_roles": list(self.added_roles),
        }
