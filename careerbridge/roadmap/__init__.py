"""Career roadmap lifecycle."""

from careerbridge.roadmap.service import RoadmapService, validate_content

__all__ = ["RoadmapService", "validate_content"]
