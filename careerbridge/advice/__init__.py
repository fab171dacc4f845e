"""Profile-aware career advice.

Public API:
    - AdviceService: mentor answers, profile suggestions, summaries and
      project description rewrites
"""

from careerbridge.advice.models import (
    ImprovedProjects,
    MentorAnswer,
    ProfessionalSummary,
    ProfilePlatform,
    ProfileSuggestion,
    ProfileSuggestions,
)
from careerbridge.advice.service import AdviceService

__all__ = [
    "AdviceService",
    "ImprovedProjects",
    "MentorAnswer",
    "ProfessionalSummary",
    "ProfilePlatform",
    "ProfileSuggestion",
    "ProfileSuggestions",
]
