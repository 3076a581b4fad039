"""Helpers for decoding base64 image payloads."""

from __future__ import annotations

import base64
import binascii
import re

from ..errors import ValidationError

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?,", re.IGNORECASE)


def strip_data_uri(text: str) -> tuple[str, str | None]:
    """Remove a ``data:image/...;base64,`` prefix and return the media type it named."""
    stripped = text.strip()
    match = _DATA_URI_PATTERN.match(stripped)
    if match is None:
        return stripped, None
    mime = match.group("mime")
    return stripped[match.end() :], mime.lower() if mime else None


def decode_base64_image(text: str) -> tuple[bytes, str | None]:
    """Decode base64 image data, accepting an optional data URI prefix.

    Returns
    -------
    tuple[bytes, str | None]
        The decoded bytes and the media type declared by the prefix, if any.
    """

    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Image data must be a non-empty base64 string.")

    payload, mime = strip_data_uri(text)
    compact = re.sub(r"\s+", "", payload)
    compact += "=" * (-len(compact) % 4)
    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"Image data is not valid base64: {exc}") from exc
    if not data:
        raise ValidationError("Decoded image data is empty.")
    return data, mime
