"""Service that turns one chart image into one validated trading recommendation."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from binaryvision.clients.gemini import GeminiModelError
from binaryvision.core.config import AnalysisSettings, ValidationPolicy
from binaryvision.schemas import (
    REQUIRED_ANALYSIS_FIELDS,
    ChartAnalysis,
    DecodedImage,
    ImageDecodeError,
    decode_data_uri,
)
from binaryvision.services.errors import (
    InvalidInputError,
    MalformedOutputError,
    MissingInputError,
    SchemaViolationError,
    UpstreamFailureError,
)
from binaryvision.services.prompts import USER_PROMPT, build_system_prompt

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(
    r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL | re.IGNORECASE
)


class VisionClient(Protocol):
    async def analyze_chart(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        mime_type: str = ...,
    ) -> str: ...


class ChartAnalysisService:
    """Sole boundary between the application and the vision model."""

    def __init__(self, vision_client: VisionClient, settings: AnalysisSettings) -> None:
        self._vision = vision_client
        self._settings = settings
        self._system_prompt = build_system_prompt(settings.reasoning_language)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def analyze(self, image: Optional[str]) -> ChartAnalysis:
        """Analyse ``image`` (a data URI) and return the validated result.

        Raises a ``ChartAnalysisError`` subclass for every failure mode; nothing
        else escapes this method.
        """
        decoded = self._decode_input(image)

        try:
            raw = await self._vision.analyze_chart(
                system_prompt=self._system_prompt,
                user_prompt=USER_PROMPT,
                image_bytes=decoded.data,
                mime_type=decoded.mime_type,
            )
        except GeminiModelError as exc:
            raise UpstreamFailureError(str(exc)) from exc
        except Exception as exc:  # pylint: disable=broad-except
            raise UpstreamFailureError(
                f"Vision call failed: {type(exc).__name__}: {exc}"
            ) from exc

        payload = parse_model_output(raw)
        analysis = validate_analysis(payload, policy=self._settings.validation_policy)
        logger.info(
            "Chart analysed: %s at %s confidence, %d indicators",
            analysis.action,
            analysis.confidence,
            len(analysis.indicators),
        )
        return analysis

    def _decode_input(self, image: Optional[str]) -> DecodedImage:
        if image is None or not image.strip():
            raise MissingInputError("Request did not include an image.")
        try:
            decoded = decode_data_uri(image)
        except ImageDecodeError as exc:
            raise InvalidInputError(str(exc)) from exc
        if len(decoded.data) > self._settings.max_image_bytes:
            raise InvalidInputError(
                f"Image is {len(decoded.data)} bytes; the limit is "
                f"{self._settings.max_image_bytes}."
            )
        return decoded


def parse_model_output(raw: Optional[str]) -> dict[str, Any]:
    """Parse the model's text as exactly one JSON object."""
    if raw is None or not raw.strip():
        raise MalformedOutputError("Model returned an empty response.")

    text = raw.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group("body")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(f"Model output is not valid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise MalformedOutputError(
            f"Model output is JSON {type(payload).__name__}, expected an object."
        )
    return payload


def validate_analysis(
    payload: dict[str, Any],
    *,
    policy: ValidationPolicy = ValidationPolicy.SCHEMA,
) -> ChartAnalysis:
    """Check ``payload`` against the analysis schema under ``policy``.

    With ``ValidationPolicy.TRUTHY`` a zero confidence or an empty indicator
    list counts as missing, matching the legacy truthiness check.
    """
    missing = [field for field in REQUIRED_ANALYSIS_FIELDS if field not in payload]
    if missing:
        raise SchemaViolationError(
            f"Missing required fields: {', '.join(missing)}", fields=missing
        )

    if policy is ValidationPolicy.TRUTHY:
        falsy = [field for field in REQUIRED_ANALYSIS_FIELDS if not payload[field]]
        if falsy:
            raise SchemaViolationError(
                f"Fields present but empty or zero: {', '.join(falsy)}", fields=falsy
            )

    try:
        return ChartAnalysis.model_validate(payload)
    except ValidationError as exc:
        invalid = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise SchemaViolationError(
            f"Invalid fields: {', '.join(invalid)}", fields=invalid
        ) from exc


__all__ = [
    "ChartAnalysisService",
    "VisionClient",
    "parse_model_output",
    "validate_analysis",
]
