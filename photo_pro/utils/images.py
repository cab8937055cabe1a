"""Base64 and data URL helpers."""

import base64
import re
from typing import Optional, Tuple, Union

from .errors import ImageReadError

_DATA_URL_PREFIX = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def bytes_to_base64(image_bytes: bytes) -> str:
    """
    Convert image bytes to base64 string.

    Args:
        image_bytes: Raw image bytes

    Returns:
        Base64 encoded string
    """
    return base64.b64encode(image_bytes).decode('utf-8')


def split_data_url(value: str) -> Tuple[Optional[str], str]:
    """
    Split ``data:<type>;base64,<payload>`` into its media type and payload.

    Values without a data URL prefix are returned unchanged with no media type.

    Raises:
        ImageReadError: If the data URL is not base64 encoded
    """
    match = _DATA_URL_PREFIX.match(value)
    if not match:
        return None, value
    params = [p.strip().lower() for p in match.group("params").split(";")]
    if "base64" not in params:
        raise ImageReadError("Only base64 data URLs are supported")
    return (match.group("mime") or None), value[match.end():]


def normalize_base64(payload: Union[str, bytes]) -> str:
    """Return a bare base64 string, re-encoding raw bytes."""
    if isinstance(payload, (bytes, bytearray)):
        return bytes_to_base64(bytes(payload))
    return _WHITESPACE.sub("", payload)


def build_data_url(mime_type: str, payload: Union[str, bytes]) -> str:
    """Build a displayable ``data:`` URL from a media type and payload."""
    return f"data:{mime_type};base64,{normalize_base64(payload)}"
