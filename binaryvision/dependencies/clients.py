"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from binaryvision.clients import GeminiClient
from binaryvision.core.config import get_settings
from binaryvision.services import ChartAnalysisService


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_gemini_client() -> GeminiClient:
    """Provide Gemini client instance."""
    settings = _settings()
    return GeminiClient(settings.gemini)


def get_chart_analysis_service() -> ChartAnalysisService:
    """Build a chart analysis service backed by Gemini."""
    settings = _settings()
    return ChartAnalysisService(get_gemini_client(), settings.analysis)


__all__ = [
    "get_chart_analysis_service",
    "get_gemini_client",
]
