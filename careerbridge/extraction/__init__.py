"""AI skill extraction from CV text."""

from careerbridge.extraction.models import ExtractedData, ExtractionOutcome, TechnicalSkill
from careerbridge.extraction.service import ExtractionService

__all__ = ["ExtractedData", "ExtractionOutcome", "ExtractionService", "TechnicalSkill"]
