"""CareerBridge core: skill matching, gap analysis and career roadmaps."""

__version__ = "0.1.0"
