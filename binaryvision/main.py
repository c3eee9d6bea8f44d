"""
FastAPI application entrypoint for the chart analysis service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from binaryvision.api.routes import router as api_router
from binaryvision.core.config import get_settings
from binaryvision.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Keep the {"error": ...} envelope for bodies FastAPI cannot parse.
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"error": "Invalid request payload."},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="BinaryVision Chart Analysis",
        version="0.1.0",
        description="Turns a trading chart image into a structured BUY/SELL recommendation.",
    )
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
