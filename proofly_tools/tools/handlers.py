"""Handlers and schemas for the deepfake analysis tools."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from ..errors import ValidationError
from ..models.base import ImageBytesRequest, ImageUrlRequest
from ..services.session_client import SessionClient
from .registry import ToolOutput, ToolRegistry, ToolSpec
from .rendering import OutputFormat, render_face, render_result, render_status

_FORMAT_PROPERTY = {
    "type": "string",
    "enum": [fmt.value for fmt in OutputFormat],
    "default": OutputFormat.TEXT.value,
    "description": "Output format.",
}


def _schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {**properties, "format": _FORMAT_PROPERTY},
        "required": required,
    }


def _output_format(arguments: Mapping[str, Any]) -> OutputFormat:
    raw = arguments.get("format") or OutputFormat.TEXT.value
    try:
        return OutputFormat(raw)
    except ValueError as exc:
        raise ValidationError(f"Unsupported format {raw!r}; expected 'text' or 'json'.") from exc


def _required_string(arguments: Mapping[str, Any], name: str) -> str:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing {name} parameter")
    return value


def _face_index(arguments: Mapping[str, Any]) -> int:
    value = arguments.get("faceIndex")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("faceIndex must be a non-negative integer")
    return value


def handle_analyze_image(
    client: SessionClient,
    arguments: Mapping[str, Any],
    *,
    cancel: threading.Event | None = None,
) -> ToolOutput:
    output_format = _output_format(arguments)
    image_base64 = _required_string(arguments, "imageBase64")
    filename = _required_string(arguments, "filename")
    request = ImageBytesRequest.from_base64(image_base64, filename)
    result = client.submit(request, cancel=cancel)
    return ToolOutput(render_result(result, output_format, base_url=client.config.base_url))


def handle_analyze_url(
    client: SessionClient,
    arguments: Mapping[str, Any],
    *,
    cancel: threading.Event | None = None,
) -> ToolOutput:
    output_format = _output_format(arguments)
    image_url = _required_string(arguments, "imageUrl")
    result = client.submit(ImageUrlRequest(image_url=image_url), cancel=cancel)
    return ToolOutput(render_result(result, output_format, base_url=client.config.base_url))


def handle_check_session_status(
    client: SessionClient,
    arguments: Mapping[str, Any],
    *,
    cancel: threading.Event | None = None,
) -> ToolOutput:
    output_format = _output_format(arguments)
    session_id = _required_string(arguments, "sessionUuid")
    snapshot = client.fetch_status(session_id)
    return ToolOutput(render_status(snapshot, output_format, base_url=client.config.base_url))


def handle_get_face_details(
    client: SessionClient,
    arguments: Mapping[str, Any],
    *,
    cancel: threading.Event | None = None,
) -> ToolOutput:
    output_format = _output_format(arguments)
    session_id = _required_string(arguments, "sessionUuid")
    face_index = _face_index(arguments)
    face = client.fetch_face_detail(session_id, face_index)
    text = render_face(
        face,
        output_format,
        index=face_index,
        session_id=session_id,
        base_url=client.config.base_url,
    )
    return ToolOutput(text)


def _register() -> None:
    ToolRegistry.register(
        ToolSpec(
            name="analyze-image",
            description="Analyzes an image provided as a base64 string for deepfake detection.",
            input_schema=_schema(
                {
                    "imageBase64": {"type": "string", "description": "Base64 encoded image data."},
                    "filename": {
                        "type": "string",
                        "description": "Original filename with extension (e.g., 'image.jpg').",
                    },
                },
                ["imageBase64", "filename"],
            ),
            handler=handle_analyze_image,
        )
    )
    ToolRegistry.register(
        ToolSpec(
            name="analyze",
            description="Analyzes an image from a URL for deepfake detection.",
            input_schema=_schema(
                {"imageUrl": {"type": "string", "description": "URL of the image to analyze."}},
                ["imageUrl"],
            ),
            handler=handle_analyze_url,
        )
    )
    ToolRegistry.register(
        ToolSpec(
            name="check-session-status",
            description="Check the status of a deepfake analysis session.",
            input_schema=_schema(
                {
                    "sessionUuid": {
                        "type": "string",
                        "description": "Session UUID to check status for.",
                    }
                },
                ["sessionUuid"],
            ),
            handler=handle_check_session_status,
        )
    )
    ToolRegistry.register(
        ToolSpec(
            name="get-face-details",
            description="Get detailed information about a specific face detected in an image.",
            input_schema=_schema(
                {
                    "sessionUuid": {
                        "type": "string",
                        "description": "Session UUID from the analyze-image result.",
                    },
                    "faceIndex": {
                        "type": "integer",
                        "minimum": 0,
                        "description": "Index of the face to get details for (starting from 0).",
                    },
                },
                ["sessionUuid", "faceIndex"],
            ),
            handler=handle_get_face_details,
        )
    )


_register()
