"""Image encoding for inline model input."""

import base64
import binascii
import re
from dataclasses import dataclass

from calorie_lens.domain.errors import InvalidImageError

MIN_ENCODED_LENGTH = 1000

_DATA_URI_PREFIX = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class EncodedImage:
    """Base64 image payload ready to embed in a data URI."""

    mime_type: str
    data: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def encode_image(
    image_bytes: bytes, min_length: int = MIN_ENCODED_LENGTH
) -> EncodedImage:
    """Encode raw image bytes, rejecting implausibly small captures."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    _check_length(encoded, min_length)
    return EncodedImage(mime_type=detect_mime_type(image_bytes), data=encoded)


def encode_base64_image(
    image_base64: str, min_length: int = MIN_ENCODED_LENGTH
) -> EncodedImage:
    """Normalize an already base64-encoded image, optionally given as a data URI."""
    text = image_base64.strip()
    declared_mime: str | None = None
    prefix = _DATA_URI_PREFIX.match(text)
    if prefix:
        declared_mime = prefix.group("mime")
        text = text[prefix.end() :]
    text = _WHITESPACE.sub("", text)
    _check_length(text, min_length)
    try:
        head = base64.b64decode(text, validate=True)[:16]
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError("Image data is not valid base64") from exc
    return EncodedImage(mime_type=declared_mime or detect_mime_type(head), data=text)


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _check_length(encoded: str, min_length: int) -> None:
    if len(encoded) < min_length:
        raise InvalidImageError(
            f"Image data too small ({len(encoded)} encoded characters)"
        )
