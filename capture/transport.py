"""HTTP client used by the capture controller to reach the analysis service."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from binaryvision.schemas import ChartAnalysis
from capture.payload import ImagePayload

ANALYZE_PATH = "/api/analyze-chart"

logger = logging.getLogger(__name__)


class AnalysisRequestError(RuntimeError):
    """Raised for any unsuccessful analysis call.

    ``status_code`` is ``None`` when the request never produced an HTTP response.
    """

    def __init__(self, detail: str, *, status_code: Optional[int] = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class AnalysisServiceClient:
    """POST an image payload to the analysis service and decode the result."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def analyze(self, image: ImagePayload) -> ChartAnalysis:
        logger.debug("Submitting %s chart (%d bytes)", image.mime_type, image.size)
        try:
            response = await self._client.post(
                ANALYZE_PATH,
                json={"image": image.data_uri},
            )
        except httpx.HTTPError as exc:
            raise AnalysisRequestError(
                f"Transport failure: {type(exc).__name__}: {exc}"
            ) from exc

        if not response.is_success:
            raise AnalysisRequestError(
                _error_detail(response),
                status_code=response.status_code,
            )

        try:
            return ChartAnalysis.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AnalysisRequestError(
                f"Service returned an unusable body: {exc}",
                status_code=response.status_code,
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AnalysisServiceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _error_detail(response: httpx.Response) -> str:
    """Pull the service's ``error`` message, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    if isinstance(body, dict) and body.get("error"):
        return f"HTTP {response.status_code}: {body['error']}"
    return f"HTTP {response.status_code}: {body!r}"


__all__ = ["ANALYZE_PATH", "AnalysisRequestError", "AnalysisServiceClient"]
