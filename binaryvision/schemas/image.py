"""Helpers for the base64 data URI form in which chart images travel."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

_DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>image/[A-Za-z0-9.+-]+)(?:;[A-Za-z0-9=.+-]+)*;base64,(?P<data>.*)$",
    re.DOTALL,
)


class ImageDecodeError(ValueError):
    """Raised when a string is not a usable base64 image data URI."""


@dataclass(frozen=True, slots=True)
class DecodedImage:
    """Raw image bytes recovered from a data URI."""

    mime_type: str
    data: bytes


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Return ``data`` as a self-describing ``data:<mime>;base64,...`` string."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_uri(value: str) -> DecodedImage:
    """Split an image data URI into its MIME type and decoded bytes."""
    match = _DATA_URI_PATTERN.match(value.strip())
    if not match:
        raise ImageDecodeError("Expected a base64 data URI with an image/* MIME type.")

    payload = re.sub(r"\s+", "", match.group("data"))
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Image data is not valid base64.") from exc
    if not data:
        raise ImageDecodeError("Image data is empty.")

    return DecodedImage(mime_type=match.group("mime").lower(), data=data)


__all__ = ["DecodedImage", "ImageDecodeError", "decode_data_uri", "encode_data_uri"]
