"""Capture/submission controller driving a single chart analysis session."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Protocol
from uuid import uuid4

from binaryvision.schemas import ChartAnalysis
from capture.config import CaptureSettings, get_capture_settings
from capture.payload import ImagePayload, ImageSource
from capture.state import Analyzing, Failed, Idle, Loaded, Notice, Result, SessionState
from capture.transport import AnalysisServiceClient

IMAGE_LOADED_NOTICE = "Image loaded successfully! Submit it for analysis to continue."
ANALYSIS_DONE_NOTICE = "Analysis completed successfully!"
ANALYSIS_FAILED_MESSAGE = "Failed to analyze the chart. Please try again."

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


class AnalysisTransport(Protocol):
    async def analyze(self, image: ImagePayload) -> ChartAnalysis: ...


class CaptureController:
    """Own one image and at most one analysis for a single user session.

    The controller moves through ``Idle -> Loaded -> Analyzing -> Result|Failed``.
    A new capture or ``clear()`` can happen at any time, including while a
    request is outstanding; the late response is then dropped.
    """

    def __init__(
        self,
        transport: AnalysisTransport,
        *,
        notice_ttl_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._notice_ttl = notice_ttl_seconds
        self._clock = clock
        self._state: SessionState = Idle()
        self._notice: Optional[Notice] = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def image(self) -> Optional[ImagePayload]:
        return getattr(self._state, "image", None)

    @property
    def analysis(self) -> Optional[ChartAnalysis]:
        if isinstance(self._state, Result):
            return self._state.analysis
        return None

    @property
    def error(self) -> Optional[str]:
        if isinstance(self._state, Failed):
            return self._state.reason
        return None

    @property
    def busy(self) -> bool:
        return isinstance(self._state, Analyzing)

    @property
    def notice(self) -> Optional[str]:
        """Current success notice, or ``None`` once it has expired."""
        if self._notice is None:
            return None
        if not self._notice.is_active(self._clock()):
            self._notice = None
            return None
        return self._notice.message

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` after every transition; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def acquire_image(
        self,
        source: ImageSource,
        *,
        mime_type: Optional[str] = None,
    ) -> ImagePayload:
        """Replace the current image, discarding any result, error or pending request.

        Raises ``InvalidImageError`` without touching the session when the
        source is not a readable image.
        """
        payload = ImagePayload.from_source(source, mime_type=mime_type)
        if isinstance(self._state, Analyzing):
            logger.debug(
                "Image replaced while request %s is outstanding; "
                "its response will be ignored",
                self._state.request_id,
            )
        self._notice = self._make_notice(IMAGE_LOADED_NOTICE)
        self._transition(Loaded(payload))
        return payload

    async def submit_for_analysis(self) -> Optional[SessionState]:
        """Send the loaded image for analysis.

        Returns the resulting ``Result`` or ``Failed`` state, or ``None`` when
        there was nothing to submit or the session moved on before the
        response arrived.
        """
        current = self._state
        if not isinstance(current, Loaded):
            logger.debug("Ignoring submit while session is %s", current.name)
            return None

        pending = Analyzing(image=current.image, request_id=uuid4().hex)
        self._notice = None
        self._transition(pending)

        outcome: SessionState
        try:
            analysis = await self._transport.analyze(pending.image)
        except asyncio.CancelledError:
            if self._is_current(pending):
                self._transition(Loaded(pending.image))
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning(
                "Analysis request %s failed: %s",
                pending.request_id,
                exc,
                exc_info=True,
            )
            outcome = Failed(image=pending.image, reason=ANALYSIS_FAILED_MESSAGE)
        else:
            outcome = Result(image=pending.image, analysis=analysis)

        if not self._is_current(pending):
            logger.debug("Discarding stale response for request %s", pending.request_id)
            return None

        if isinstance(outcome, Result):
            self._notice = self._make_notice(ANALYSIS_DONE_NOTICE)
        self._transition(outcome)
        return outcome

    def retry(self) -> Optional[ImagePayload]:
        """Put the image from a finished attempt back into ``Loaded``.

        Valid from ``Failed`` or ``Result``; returns the reloaded payload, or
        ``None`` when there is no finished attempt to retry.
        """
        current = self._state
        if not isinstance(current, (Failed, Result)):
            logger.debug("Ignoring retry while session is %s", current.name)
            return None
        self._notice = None
        self._transition(Loaded(current.image))
        return current.image

    def clear(self) -> None:
        """Drop the image and anything derived from it."""
        self._notice = None
        self._transition(Idle())

    def _is_current(self, pending: Analyzing) -> bool:
        state = self._state
        return isinstance(state, Analyzing) and state.request_id == pending.request_id

    def _make_notice(self, message: str) -> Notice:
        return Notice(message=message, expires_at=self._clock() + self._notice_ttl)

    def _transition(self, new_state: SessionState) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:  # pylint: disable=broad-except
                logger.exception(
                    "State listener %r failed on transition to %s",
                    listener,
                    new_state.name,
                )


def create_controller(
    settings: Optional[CaptureSettings] = None,
) -> tuple[CaptureController, AnalysisServiceClient]:
    """Build a controller wired to the configured analysis service.

    The caller owns the returned client and must close it.
    """
    settings = settings or get_capture_settings()
    client = AnalysisServiceClient(
        settings.service_url,
        timeout=settings.request_timeout_seconds,
    )
    controller = CaptureController(
        client,
        notice_ttl_seconds=settings.notice_ttl_seconds,
    )
    return controller, client


__all__ = [
    "ANALYSIS_DONE_NOTICE",
    "ANALYSIS_FAILED_MESSAGE",
    "AnalysisTransport",
    "CaptureController",
    "IMAGE_LOADED_NOTICE",
    "create_controller",
]
