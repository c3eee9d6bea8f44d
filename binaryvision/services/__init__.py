"""Service layer exports."""

from .chart_analysis import ChartAnalysisService, parse_model_output, validate_analysis
from .errors import (
    ChartAnalysisError,
    InvalidInputError,
    MalformedOutputError,
    MissingInputError,
    SchemaViolationError,
    UpstreamFailureError,
)

__all__ = [
    "ChartAnalysisError",
    "ChartAnalysisService",
    "InvalidInputError",
    "MalformedOutputError",
    "MissingInputError",
    "SchemaViolationError",
    "UpstreamFailureError",
    "parse_model_output",
    "validate_analysis",
]
