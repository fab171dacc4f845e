"""User profile service."""

from careerbridge.profile.service import ProfileService

__all__ = ["ProfileService"]
