"""Tool registry, handlers and output rendering."""

from .handlers import (
    handle_analyze_image,
    handle_analyze_url,
    handle_check_session_status,
    handle_get_face_details,
)
from .registry import ToolDispatcher, ToolOutput, ToolRegistry, ToolSpec
from .rendering import OutputFormat

__all__ = [
    "OutputFormat",
    "ToolDispatcher",
    "ToolOutput",
    "ToolRegistry",
    "ToolSpec",
    "handle_analyze_image",
    "handle_analyze_url",
    "handle_check_session_status",
    "handle_get_face_details",
]
