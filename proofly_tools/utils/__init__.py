"""Utility helpers for the Proofly tools package."""

from .images import sniff_content_type
from .paths import content_type_for_filename, filename_from_url, is_http_url
from .text import decode_base64_image, strip_data_uri

__all__ = [
    "content_type_for_filename",
    "decode_base64_image",
    "filename_from_url",
    "is_http_url",
    "sniff_content_type",
    "strip_data_uri",
]
