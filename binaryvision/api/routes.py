"""
FastAPI routes for the chart analysis service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from binaryvision.dependencies import get_app_settings, get_chart_analysis_service
from binaryvision.schemas import (
    AnalysisErrorResponse,
    ChartAnalysis,
    ChartAnalysisRequest,
)
from binaryvision.services import ChartAnalysisError, ChartAnalysisService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    settings: Annotated[Any, Depends(get_app_settings)],
) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post(
    "/analyze-chart",
    status_code=HTTPStatus.OK,
    response_model=ChartAnalysis,
    responses={
        HTTPStatus.BAD_REQUEST: {"model": AnalysisErrorResponse},
        HTTPStatus.INTERNAL_SERVER_ERROR: {"model": AnalysisErrorResponse},
    },
)
async def analyze_chart(
    payload: ChartAnalysisRequest,
    service: Annotated[ChartAnalysisService, Depends(get_chart_analysis_service)],
) -> Any:
    """Run one chart image through the vision model and return the recommendation."""
    try:
        return await service.analyze(payload.image)
    except ChartAnalysisError as exc:
        logger.warning(
            "Chart analysis failed [%s]: %s",
            exc.kind,
            exc.detail,
            exc_info=exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.public_message},
        )


__all__ = ["router"]
