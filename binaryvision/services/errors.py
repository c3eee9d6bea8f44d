"""Classified failures raised by the chart analysis service."""

from __future__ import annotations

from http import HTTPStatus

GENERIC_FAILURE_MESSAGE = "Failed to process the chart analysis."


class ChartAnalysisError(Exception):
    """Base class for every failure surfaced at the analysis boundary.

    ``public_message`` is what callers may show to clients; ``detail`` keeps the
    internal explanation for logs only.
    """

    kind: str = "analysis_error"
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    public_message: str = GENERIC_FAILURE_MESSAGE

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.public_message
        super().__init__(self.detail)


class MissingInputError(ChartAnalysisError):
    kind = "missing_input"
    status_code = HTTPStatus.BAD_REQUEST
    public_message = "No image was provided."


class InvalidInputError(MissingInputError):
    """The image is present but cannot be sent to the model."""

    kind = "invalid_input"
    public_message = "The provided image could not be read."


class MalformedOutputError(ChartAnalysisError):
    kind = "malformed_output"


class SchemaViolationError(ChartAnalysisError):
    kind = "schema_violation"

    def __init__(
        self, detail: str | None = None, *, fields: list[str] | None = None
    ) -> None:
        self.fields = fields or []
        super().__init__(detail)


class UpstreamFailureError(ChartAnalysisError):
    kind = "upstream_failure"


__all__ = [
    "ChartAnalysisError",
    "GENERIC_FAILURE_MESSAGE",
    "InvalidInputError",
    "MalformedOutputError",
    "MissingInputError",
    "SchemaViolationError",
    "UpstreamFailureError",
]
