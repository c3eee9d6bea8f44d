try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio

import pytest

from binaryvision.schemas import ChartAnalysis
from capture import (
    AnalysisRequestError,
    Analyzing,
    CaptureController,
    Failed,
    Idle,
    InvalidImageError,
    Loaded,
    Result,
)
from capture.controller import (
    ANALYSIS_DONE_NOTICE,
    ANALYSIS_FAILED_MESSAGE,
    IMAGE_LOADED_NOTICE,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def _analysis(action: str = "BUY", confidence: int = 82) -> ChartAnalysis:
    return ChartAnalysis(
        action=action,
        confidence=confidence,
        reasoning="uptrend",
        indicators=["MA crossover", "RSI 65"],
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class ImmediateTransport:
    def __init__(self, result: ChartAnalysis | None = None, error: Exception | None = None) -> None:
        self.result = result or _analysis()
        self.error = error
        self.images = []

    async def analyze(self, image):
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return self.result


class GatedTransport:
    """Hold every request open until the test releases it."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.result = _analysis()
        self.error: Exception | None = None

    async def analyze(self, image):
        self.started.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


def test_starts_idle():
    controller = CaptureController(ImmediateTransport())

    assert isinstance(controller.state, Idle)
    assert controller.image is None
    assert controller.analysis is None
    assert controller.error is None
    assert controller.notice is None
    assert controller.busy is False


def test_acquire_image_loads_and_emits_expiring_notice(png_bytes):
    clock = FakeClock()
    controller = CaptureController(ImmediateTransport(), notice_ttl_seconds=3, clock=clock)

    payload = controller.acquire_image(png_bytes)

    assert controller.state == Loaded(payload)
    assert payload.data_uri.startswith("data:image/png;base64,")
    assert controller.notice == IMAGE_LOADED_NOTICE

    clock.now += 2.9
    assert controller.notice == IMAGE_LOADED_NOTICE
    clock.now += 0.2
    assert controller.notice is None


def test_acquire_invalid_image_keeps_current_state(png_bytes):
    controller = CaptureController(ImmediateTransport())
    payload = controller.acquire_image(png_bytes)

    with pytest.raises(InvalidImageError):
        controller.acquire_image(b"")
    with pytest.raises(InvalidImageError):
        controller.acquire_image(b"plain text, not an image")

    assert controller.state == Loaded(payload)


@pytest.mark.asyncio
async def test_submit_without_image_is_noop():
    transport = ImmediateTransport()
    controller = CaptureController(transport)

    assert await controller.submit_for_analysis() is None
    assert isinstance(controller.state, Idle)
    assert transport.images == []


@pytest.mark.asyncio
async def test_submit_success_moves_to_result(png_bytes):
    transport = ImmediateTransport()
    controller = CaptureController(transport)
    payload = controller.acquire_image(png_bytes)
    seen = []
    controller.subscribe(lambda state: seen.append(state.name))

    outcome = await controller.submit_for_analysis()

    assert isinstance(outcome, Result)
    assert controller.state is outcome
    assert outcome.image == payload
    assert controller.analysis == transport.result
    assert controller.notice == ANALYSIS_DONE_NOTICE
    assert transport.images == [payload]
    assert seen == ["analyzing", "result"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        AnalysisRequestError("HTTP 500: boom", status_code=500),
        AnalysisRequestError("Transport failure: ConnectError"),
        RuntimeError("unexpected"),
    ],
)
async def test_any_failure_maps_to_generic_failed_state(png_bytes, error):
    controller = CaptureController(ImmediateTransport(error=error))
    payload = controller.acquire_image(png_bytes)

    outcome = await controller.submit_for_analysis()

    assert outcome == Failed(image=payload, reason=ANALYSIS_FAILED_MESSAGE)
    assert controller.error == ANALYSIS_FAILED_MESSAGE
    assert controller.busy is False
    assert controller.notice is None


@pytest.mark.asyncio
async def test_submit_only_from_loaded(png_bytes):
    transport = ImmediateTransport()
    controller = CaptureController(transport)
    controller.acquire_image(png_bytes)
    await controller.submit_for_analysis()

    assert await controller.submit_for_analysis() is None
    assert len(transport.images) == 1


@pytest.mark.asyncio
async def test_retry_after_failure_resubmits_same_image(png_bytes):
    transport = ImmediateTransport(error=AnalysisRequestError("HTTP 500", status_code=500))
    controller = CaptureController(transport)
    payload = controller.acquire_image(png_bytes)
    assert isinstance(await controller.submit_for_analysis(), Failed)

    assert controller.retry() == payload
    assert controller.state == Loaded(payload)
    assert controller.error is None

    transport.error = None
    outcome = await controller.submit_for_analysis()

    assert isinstance(outcome, Result)
    assert transport.images == [payload, payload]


def test_retry_outside_finished_attempt_is_noop(png_bytes):
    controller = CaptureController(ImmediateTransport())

    assert controller.retry() is None
    assert isinstance(controller.state, Idle)

    payload = controller.acquire_image(png_bytes)

    assert controller.retry() is None
    assert controller.state == Loaded(payload)


@pytest.mark.asyncio
async def test_failing_listener_does_not_strand_session(png_bytes, caplog):
    transport = ImmediateTransport()
    controller = CaptureController(transport)
    payload = controller.acquire_image(png_bytes)

    def explode_on_analyzing(state):
        if isinstance(state, Analyzing):
            raise RuntimeError("listener bug")

    controller.subscribe(explode_on_analyzing)

    with caplog.at_level("ERROR", logger="capture.controller"):
        outcome = await controller.submit_for_analysis()

    assert isinstance(outcome, Result)
    assert controller.busy is False
    assert transport.images == [payload]
    assert "State listener" in caplog.text


@pytest.mark.asyncio
async def test_new_capture_clears_previous_result(png_bytes):
    controller = CaptureController(ImmediateTransport())
    controller.acquire_image(png_bytes)
    await controller.submit_for_analysis()
    assert controller.analysis is not None

    second = controller.acquire_image(JPEG_BYTES)

    assert controller.state == Loaded(second)
    assert second.mime_type == "image/jpeg"
    assert controller.analysis is None
    assert controller.error is None


@pytest.mark.asyncio
async def test_clear_resets_from_failed(png_bytes):
    controller = CaptureController(ImmediateTransport(error=AnalysisRequestError("down")))
    controller.acquire_image(png_bytes)
    await controller.submit_for_analysis()

    controller.clear()

    assert isinstance(controller.state, Idle)
    assert controller.image is None
    assert controller.error is None
    assert controller.notice is None


@pytest.mark.asyncio
async def test_single_flight_while_analyzing(png_bytes):
    transport = GatedTransport()
    controller = CaptureController(transport)
    controller.acquire_image(png_bytes)

    task = asyncio.create_task(controller.submit_for_analysis())
    await transport.started.wait()

    assert controller.busy is True
    assert isinstance(controller.state, Analyzing)
    assert await controller.submit_for_analysis() is None

    transport.release.set()
    outcome = await task
    assert isinstance(outcome, Result)


@pytest.mark.asyncio
async def test_late_response_after_new_capture_is_discarded(png_bytes):
    transport = GatedTransport()
    controller = CaptureController(transport)
    controller.acquire_image(png_bytes)

    task = asyncio.create_task(controller.submit_for_analysis())
    await transport.started.wait()
    second = controller.acquire_image(JPEG_BYTES)

    transport.release.set()
    assert await task is None

    assert controller.state == Loaded(second)
    assert controller.analysis is None


@pytest.mark.asyncio
async def test_late_failure_after_clear_is_discarded(png_bytes):
    transport = GatedTransport()
    transport.error = AnalysisRequestError("HTTP 500", status_code=500)
    controller = CaptureController(transport)
    controller.acquire_image(png_bytes)

    task = asyncio.create_task(controller.submit_for_analysis())
    await transport.started.wait()
    controller.clear()

    transport.release.set()
    assert await task is None

    assert isinstance(controller.state, Idle)
    assert controller.error is None


@pytest.mark.asyncio
async def test_late_response_for_resubmitted_same_image_is_discarded(png_bytes):
    transport = GatedTransport()
    controller = CaptureController(transport)
    controller.acquire_image(png_bytes)

    first = asyncio.create_task(controller.submit_for_analysis())
    await transport.started.wait()
    controller.acquire_image(png_bytes)
    second = asyncio.create_task(controller.submit_for_analysis())
    await asyncio.sleep(0)
    pending = controller.state

    transport.release.set()
    assert await first is None
    outcome = await second

    assert isinstance(pending, Analyzing)
    assert isinstance(outcome, Result)
    assert controller.state is outcome


@pytest.mark.asyncio
async def test_cancelled_submit_returns_to_loaded(png_bytes):
    transport = GatedTransport()
    controller = CaptureController(transport)
    payload = controller.acquire_image(png_bytes)

    task = asyncio.create_task(controller.submit_for_analysis())
    await transport.started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert controller.state == Loaded(payload)


def test_unsubscribe_stops_notifications(png_bytes):
    controller = CaptureController(ImmediateTransport())
    seen = []
    unsubscribe = controller.subscribe(seen.append)

    controller.acquire_image(png_bytes)
    unsubscribe()
    controller.clear()

    assert [state.name for state in seen] == ["loaded"]
