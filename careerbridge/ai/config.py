"""Configuration settings for the AI provider client."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIConfig(BaseSettings):
    """AI provider configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `AI_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials (a provider without a key is treated as unavailable)
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for Google Gemini",
    )
    groq_api_key: str | None = Field(
        default=None,
        description="API key for Groq",
    )

    # Models (LiteLLM routes on the provider prefix added by the client)
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model ID",
    )
    groq_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Groq model ID",
    )

    timeout: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Timeout per provider call in seconds",
    )
    extraction_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.3,
        description="Sampling temperature for CV skill extraction",
    )
    roadmap_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.7,
        description="Sampling temperature for roadmap generation",
    )
    advice_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.7,
        description="Sampling temperature for mentor answers and profile advice",
    )


# Singleton instance for easy import
_ai_config: AIConfig | None = None


def get_ai_config() -> AIConfig:
    """Get the AI configuration singleton."""
    global _ai_config
    if _ai_config is None:
        _ai_config = AIConfig()
    return _ai_config


def reset_ai_config() -> None:
    """Reset the AI configuration singleton (useful for testing)."""
    global _ai_config
    _ai_config = None
