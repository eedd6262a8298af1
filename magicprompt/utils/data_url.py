"""Data URL helpers shared by every backend builder."""

import re
from typing import Optional


DATA_URL_PREFIX = re.compile(r"^data:(?P<mime>[^;,]+)(?:;[^;,]+)*?;base64,", re.IGNORECASE)

FORMAT_MIME_TYPES = {
    "PNG": "image/png",
    "WEBP": "image/webp",
    "JPG": "image/jpeg",
    "JPEG": "image/jpeg",
}


def is_data_uri(value: str) -> bool:
    """Check if a string is a base64 data URL."""
    return bool(value) and DATA_URL_PREFIX.match(value) is not None


def get_data_url_mime(value: str) -> Optional[str]:
    """Return the MIME type declared by a data URL prefix, or None."""
    if not value:
        return None
    match = DATA_URL_PREFIX.match(value)
    return match.group("mime") if match else None


def strip_data_url_prefix(value: str) -> str:
    """Return the bare base64 payload of a data URL or raw base64 string."""
    if not value:
        return value
    match = DATA_URL_PREFIX.match(value)
    return value[match.end():] if match else value


def to_data_url(payload: str, mime_type: str) -> str:
    """Wrap a base64 payload in a data URL for the given MIME type.

    An existing prefix is replaced, so raw base64 and data URLs produce the
    same output.
    """
    return f"data:{mime_type};base64,{strip_data_url_prefix(payload)}"


def mime_for_format(image_format: str) -> str:
    """Map an image format name (PNG, WEBP, JPG) to its MIME type."""
    try:
        return FORMAT_MIME_TYPES[image_format.upper()]
    except KeyError:
        raise ValueError(f"Unsupported image format: {image_format}") from None
