"""Client wrapper for interacting with Google Gemini vision models."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError, NotFound

from binaryvision.core.config import GeminiSettings

logger = logging.getLogger(__name__)


class GeminiModelError(RuntimeError):
    """Raised when Gemini cannot fulfill a request."""


class GeminiClient:
    """Send a chart image plus instructions to Gemini and return the raw text."""

    def __init__(self, settings: GeminiSettings) -> None:
        self._settings = settings
        # Configure the global client once per process.
        genai.configure(api_key=settings.api_key)

    @property
    def model_name(self) -> str:
        return self._settings.vision_model_name

    async def analyze_chart(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        mime_type: str = "image/png",
    ) -> str:
        """Invoke the vision model exactly once and return its text output.

        The response is returned verbatim; parsing and validation belong to the
        caller. Any capability-side failure surfaces as ``GeminiModelError``.
        """

        def _invoke() -> str:
            model = genai.GenerativeModel(
                self._settings.vision_model_name,
                system_instruction=system_prompt,
                generation_config=self._generation_config(),
            )
            try:
                response = model.generate_content(
                    [
                        user_prompt,
                        {
                            "mime_type": mime_type,
                            "data": image_bytes,
                        },
                    ],
                    safety_settings=[],
                )
            except NotFound as exc:
                raise GeminiModelError(
                    "Gemini model '"
                    f"{self._settings.vision_model_name}"
                    "' is not available. Update GEMINI_VISION_MODEL_NAME "
                    "to a supported value."
                ) from exc
            except GoogleAPIError as exc:
                raise GeminiModelError(
                    f"Gemini vision generate_content failed: {exc}"
                ) from exc
            return _response_text(response)

        logger.debug(
            "Requesting chart analysis from %s (%d image bytes, %s)",
            self._settings.vision_model_name,
            len(image_bytes),
            mime_type,
        )
        return await asyncio.to_thread(_invoke)

    def _generation_config(self) -> genai.GenerationConfig:
        return genai.GenerationConfig(
            max_output_tokens=self._settings.max_output_tokens,
            temperature=self._settings.temperature,
            response_mime_type="application/json",
        )


def _response_text(response: Any) -> str:
    """Extract text from a Gemini response, treating blocked output as a failure."""
    try:
        return response.text or ""
    except ValueError as exc:
        # ``response.text`` raises when no candidate carries text (e.g. safety block).
        raise GeminiModelError(f"Gemini returned no usable text: {exc}") from exc


__all__ = ["GeminiClient", "GeminiModelError"]
