"""Expose dependency helpers for FastAPI routers."""

from .clients import get_chart_analysis_service, get_gemini_client
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_chart_analysis_service",
    "get_gemini_client",
]
