"""Client-side capture and submission of chart images.

A ``CaptureController`` owns one session: the current image, the pending
request and the last analysis shown for that image.
"""

from .controller import CaptureController, create_controller
from .payload import ImagePayload, InvalidImageError
from .state import Analyzing, Failed, Idle, Loaded, Result, SessionState
from .transport import AnalysisRequestError, AnalysisServiceClient

__all__ = [
    "AnalysisRequestError",
    "AnalysisServiceClient",
    "Analyzing",
    "CaptureController",
    "Failed",
    "Idle",
    "ImagePayload",
    "InvalidImageError",
    "Loaded",
    "Result",
    "SessionState",
    "create_controller",
]
