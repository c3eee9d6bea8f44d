"""
Pydantic models for chart analysis requests and responses.
"""

import math
from typing import Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)

TradeAction = Literal["BUY", "SELL"]

REQUIRED_ANALYSIS_FIELDS: tuple[str, ...] = (
    "action",
    "confidence",
    "reasoning",
    "indicators",
)


class ChartAnalysisRequest(BaseModel):
    """Incoming payload carrying one encoded chart image."""

    image: Optional[str] = Field(
        None,
        description="Chart image encoded as a base64 data URI (data:image/png;base64,...).",
    )


class ChartAnalysis(BaseModel):
    """Validated trading recommendation produced from a single chart image."""

    model_config = ConfigDict(extra="ignore")

    action: TradeAction = Field(..., description="Directional call, BUY or SELL.")
    confidence: Union[StrictInt, StrictFloat] = Field(
        ..., description="Model confidence, expected between 0 and 100."
    )
    reasoning: StrictStr = Field(
        ..., min_length=1, description="Explanation of the technical read."
    )
    indicators: list[StrictStr] = Field(
        ..., description="Technical indicators identified on the chart, in display order."
    )

    @field_validator("confidence")
    @classmethod
    def _finite_confidence(cls, value: Union[int, float]) -> Union[int, float]:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("confidence must be a finite number")
        return value


class AnalysisErrorResponse(BaseModel):
    """Error envelope returned by the analysis endpoint."""

    error: str


__all__ = [
    "AnalysisErrorResponse",
    "ChartAnalysis",
    "ChartAnalysisRequest",
    "REQUIRED_ANALYSIS_FIELDS",
    "TradeAction",
]
