"""Persistence layer.

Public API:
- CareerRepository: async SQLite repository for all records
- User, JobPosting, LearningResource: matching inputs
- ExtractedSkillRecord, AIExtractionRecord: AI extraction outputs
- CareerRoadmap, RoadmapContent, RoadmapPhase, ProjectSuggestion: roadmaps
"""

from careerbridge.storage.models import (
    AIExtractionRecord,
    CareerRoadmap,
    ExperienceLevel,
    ExtractedSkillRecord,
    JobPosting,
    JobType,
    LearningResource,
    ProjectSuggestion,
    ResourceCost,
    RoadmapContent,
    RoadmapPhase,
    User,
)
from careerbridge.storage.repository import CareerRepository

__all__ = [
    "CareerRepository",
    "User",
    "JobPosting",
    "LearningResource",
    "ExperienceLevel",
    "JobType",
    "ResourceCost",
    "ExtractedSkillRecord",
    "AIExtractionRecord",
    "CareerRoadmap",
    "RoadmapContent",
    "RoadmapPhase",
    "ProjectSuggestion",
]
