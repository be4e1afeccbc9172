"""
Helpers for certificate images sent inline as data URIs or bare base64.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_IMAGE_MIME = "image/png"
DEFAULT_IMAGE_EXTENSION = "png"

DATA_URI_RE = re.compile(r"^data:(.+);base64,(.*)$", re.DOTALL)
NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/]")
URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")

# Checked in order; substring match on the mime string as given
MIME_EXTENSIONS = (
    (("jpeg", "jpg"), "jpg"),
    (("png",), "png"),
    (("webp",), "webp"),
)


class ImageDecodeError(ValueError):
    pass


@dataclass(frozen=True)
class ParsedImage:
    mime: str
    base64: str


def parse_image(value: Any) -> Optional[ParsedImage]:
    """Split a data URI into (mime, payload).

    Anything that is not a data URI is taken as a bare base64 payload and
    assumed to be PNG. The payload itself is not validated here.
    """
    if not value or not isinstance(value, str):
        return None

    match = DATA_URI_RE.match(value)
    if match:
        return ParsedImage(mime=match.group(1), base64=match.group(2))

    return ParsedImage(mime=DEFAULT_IMAGE_MIME, base64=value)


def extension_for_mime(mime: Optional[str]) -> str:
    if not mime:
        return DEFAULT_IMAGE_EXTENSION
    for needles, extension in MIME_EXTENSIONS:
        if any(needle in mime for needle in needles):
            return extension
    return DEFAULT_IMAGE_EXTENSION


def extension_from_path(path: str) -> str:
    """Suffix after the last dot of a storage key, "png" when there is none."""
    if "." not in path:
        return DEFAULT_IMAGE_EXTENSION
    return path.rsplit(".", 1)[1] or DEFAULT_IMAGE_EXTENSION


def decode_payload(payload: str) -> bytes:
    """Lenient base64 decode, accepting both the standard and URL-safe alphabets.

    Decoding stops at the first "=", characters outside the alphabet are
    dropped, a dangling sixth-bit character is ignored and padding is
    restored. Raises ImageDecodeError when nothing decodable remains.
    """
    cleaned = payload.split("=", 1)[0].translate(URLSAFE_TO_STANDARD)
    cleaned = NON_BASE64_RE.sub("", cleaned)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        content = base64.b64decode(cleaned)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image payload: {e}") from e
    if not content:
        raise ImageDecodeError("Image payload holds no base64 data")
    return content
