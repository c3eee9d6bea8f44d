"""
Session state values for the capture controller.

Exactly one of these is current at any time; each carries the image payload it
belongs to so a result can never be paired with a different image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from binaryvision.schemas import ChartAnalysis
from capture.payload import ImagePayload


@dataclass(frozen=True, slots=True)
class Idle:
    name = "idle"


@dataclass(frozen=True, slots=True)
class Loaded:
    image: ImagePayload

    name = "loaded"


@dataclass(frozen=True, slots=True)
class Analyzing:
    image: ImagePayload
    request_id: str

    name = "analyzing"


@dataclass(frozen=True, slots=True)
class Result:
    image: ImagePayload
    analysis: ChartAnalysis

    name = "result"


@dataclass(frozen=True, slots=True)
class Failed:
    image: ImagePayload
    reason: str

    name = "failed"


SessionState = Union[Idle, Loaded, Analyzing, Result, Failed]


@dataclass(frozen=True, slots=True)
class Notice:
    """Transient success message that disappears after ``expires_at``."""

    message: str
    expires_at: float

    def is_active(self, now: float) -> bool:
        return now < self.expires_at


__all__ = [
    "Analyzing",
    "Failed",
    "Idle",
    "Loaded",
    "Notice",
    "Result",
    "SessionState",
]
