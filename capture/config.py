"""Settings for the capture client."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CaptureSettings(BaseSettings):
    """Client-side configuration; never needs the inference credential."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    service_url: str = Field(
        "http://localhost:8000",
        validation_alias="CAPTURE_SERVICE_URL",
        description="Base URL of the analysis service.",
    )
    request_timeout_seconds: float = Field(
        60.0, gt=0, validation_alias="CAPTURE_REQUEST_TIMEOUT"
    )
    notice_ttl_seconds: float = Field(
        3.0,
        ge=0,
        validation_alias="CAPTURE_NOTICE_TTL",
        description="How long success notices stay visible.",
    )
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")


@lru_cache()
def get_capture_settings() -> CaptureSettings:
    """Return a cached settings object."""
    return CaptureSettings()


__all__ = ["CaptureSettings", "get_capture_settings"]
