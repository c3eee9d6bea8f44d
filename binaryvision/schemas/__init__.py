"""Public schema exports."""

from .analysis import (
    REQUIRED_ANALYSIS_FIELDS,
    AnalysisErrorResponse,
    ChartAnalysis,
    ChartAnalysisRequest,
    TradeAction,
)
from .image import DecodedImage, ImageDecodeError, decode_data_uri, encode_data_uri

__all__ = [
    "AnalysisErrorResponse",
    "ChartAnalysis",
    "ChartAnalysisRequest",
    "DecodedImage",
    "ImageDecodeError",
    "REQUIRED_ANALYSIS_FIELDS",
    "TradeAction",
    "decode_data_uri",
    "encode_data_uri",
]
