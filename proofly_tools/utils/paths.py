"""Filename and media type helpers for uploads."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

DEFAULT_FILENAME = "image.jpg"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
}


def content_type_for_filename(filename: str) -> str | None:
    """Return the image media type implied by the extension of ``filename``."""
    suffix = PurePosixPath(filename).suffix.lower()
    return CONTENT_TYPES.get(suffix)


def filename_from_url(url: str, *, default: str = DEFAULT_FILENAME) -> str:
    """Use the last path segment of ``url``, ignoring query string and fragment."""
    path = urlsplit(url).path
    name = unquote(path.rsplit("/", 1)[-1]).strip()
    return name or default


def is_http_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme in {"http", "https"} and bool(parts.netloc)
