"""Encoding of user-supplied chart images into the payload sent for analysis."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from binaryvision.schemas import encode_data_uri

ImageSource = Union[bytes, bytearray, str, Path, BinaryIO]

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


class InvalidImageError(ValueError):
    """Raised when a capture source cannot be turned into an image payload."""


@dataclass(frozen=True, slots=True)
class ImagePayload:
    """One encoded chart image, held in memory only."""

    data_uri: str
    mime_type: str
    size: int

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> "ImagePayload":
        if not data:
            raise InvalidImageError("Image source is empty.")
        resolved = mime_type or sniff_mime_type(data)
        if not resolved or not resolved.startswith("image/"):
            raise InvalidImageError(
                f"Unsupported image type: {resolved or 'unknown'}."
            )
        return cls(
            data_uri=encode_data_uri(bytes(data), resolved),
            mime_type=resolved,
            size=len(data),
        )

    @classmethod
    def from_source(
        cls,
        source: ImageSource,
        mime_type: Optional[str] = None,
    ) -> "ImagePayload":
        """Read ``source`` (bytes, a path or a binary file object) and encode it."""
        if isinstance(source, (bytes, bytearray)):
            return cls.from_bytes(bytes(source), mime_type)

        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                data = path.read_bytes()
            except OSError as exc:
                raise InvalidImageError(f"Cannot read image file {path}: {exc}") from exc
            return cls.from_bytes(data, mime_type or _guess_from_name(path.name, data))

        data = source.read()
        name = getattr(source, "name", None)
        if isinstance(name, str):
            mime_type = mime_type or _guess_from_name(name, data)
        return cls.from_bytes(data, mime_type)


def sniff_mime_type(data: bytes) -> Optional[str]:
    """Identify common raster formats from their leading bytes."""
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def _guess_from_name(name: str, data: bytes) -> Optional[str]:
    return sniff_mime_type(data) or mimetypes.guess_type(name)[0]


__all__ = ["ImagePayload", "ImageSource", "InvalidImageError", "sniff_mime_type"]
