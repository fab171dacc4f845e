"""Configuration settings for CareerBridge."""

from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIProvider(str, Enum):
    """Supported AI providers."""

    GEMINI = "gemini"
    GROQ = "groq"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_path: Path = Field(
        default=Path("./data/careerbridge.db"),
        description="Path to the SQLite database",
    )
    database_timeout: Annotated[float, Field(gt=0)] = Field(
        default=5.0,
        description="Seconds to wait on a locked database before failing",
    )

    # Result sizes
    default_result_limit: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Number of recommendations returned when no limit is given",
    )
    max_result_limit: Annotated[int, Field(gt=0)] = Field(
        default=100,
        description="Largest limit a caller may request",
    )

    # AI
    default_ai_provider: AIProvider = Field(
        default=AIProvider.GEMINI,
        description="Provider used when a request does not name one: 'gemini' or 'groq'",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file that receives a copy of every log record",
    )

    @field_validator("default_ai_provider", mode="before")
    @classmethod
    def validate_provider(cls, v: str | AIProvider) -> AIProvider:
        """Accept provider names in any case."""
        if isinstance(v, AIProvider):
            return v
        if isinstance(v, str):
            try:
                return AIProvider(v.strip().lower())
            except ValueError:
                raise ValueError(
                    f"Invalid AI provider: {v}. Must be 'gemini' or 'groq'"
                ) from None
        raise ValueError(f"Invalid AI provider type: {type(v)}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """The default limit must itself be a valid limit."""
        if self.default_result_limit > self.max_result_limit:
            raise ValueError(
                "default_result_limit must not exceed max_result_limit "
                f"({self.default_result_limit} > {self.max_result_limit})"
            )
        return self


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
