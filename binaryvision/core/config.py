"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the chart analysis
service and the developer scripts share a consistent configuration surface.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class ValidationPolicy(str, Enum):
    """How strictly boundary values in model output are judged."""

    SCHEMA = "schema"
    TRUTHY = "truthy"


class GeminiSettings(BaseSettings):
    """Configuration for Gemini model access."""

    model_config = SettingsConfigDict(extra="ignore")

    api_key: str = Field(..., validation_alias="GEMINI_API_KEY")
    vision_model_name: str = Field(
        "gemini-1.5-flash", validation_alias="GEMINI_VISION_MODEL_NAME"
    )
    max_output_tokens: int = Field(
        1000,
        gt=0,
        validation_alias="GEMINI_MAX_OUTPUT_TOKENS",
        description="Upper bound on generated tokens for a single analysis.",
    )
    temperature: float = Field(
        0.3,
        ge=0.0,
        le=2.0,
        validation_alias="GEMINI_TEMPERATURE",
        description="Low values bias the model toward schema-compliant output.",
    )


class AnalysisSettings(BaseSettings):
    """Knobs for prompt construction and output validation."""

    model_config = SettingsConfigDict(extra="ignore")

    reasoning_language: str = Field(
        "Portuguese",
        validation_alias="ANALYSIS_REASONING_LANGUAGE",
        description="Language the model must use for the reasoning field.",
    )
    validation_policy: ValidationPolicy = Field(
        ValidationPolicy.SCHEMA,
        validation_alias="ANALYSIS_VALIDATION_POLICY",
        description=(
            "'schema' accepts zero confidence and empty indicator lists; "
            "'truthy' rejects them like the legacy validator did."
        ),
    )
    max_image_bytes: int = Field(
        10 * 1024 * 1024,
        gt=0,
        validation_alias="ANALYSIS_MAX_IMAGE_BYTES",
    )

    @field_validator("validation_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: object) -> object:
        """Accept policy names regardless of case or surrounding whitespace."""
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(extra="ignore")

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AnalysisSettings",
    "AppSettings",
    "GeminiSettings",
    "ValidationPolicy",
    "get_settings",
]
