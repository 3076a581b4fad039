"""Identify image formats from raw bytes."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def sniff_content_type(data: bytes) -> str | None:
    """Return the media type Pillow recognises in ``data``, or ``None``."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        logger.debug("Could not identify image format: %s", exc)
        return None
    if not image_format:
        return None
    return Image.MIME.get(image_format.upper())
