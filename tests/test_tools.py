"""Tests for the tool registry, dispatcher and handlers."""

from __future__ import annotations

import base64
import json

import pytest

from proofly_tools.config import AppConfig
from proofly_tools.errors import (
    AnalysisCancelledError,
    NotFoundError,
    UnknownToolError,
    ValidationError,
)
from proofly_tools.models.base import (
    AnalysisResult,
    Face,
    ImageBytesRequest,
    ImageUrlRequest,
    StatusSnapshot,
)
from proofly_tools.services.session_client import SessionClient
from proofly_tools.tools.registry import ToolDispatcher, ToolOutput, ToolRegistry, ToolSpec


class DummyClient:
    def __init__(self) -> None:
        self.config = AppConfig(base_url="https://api.test")
        self.submitted: list[object] = []
        self.cancel_events: list[object] = []
        self.face_calls: list[tuple[str, int]] = []

    def submit(self, request, *, cancel=None):
        self.submitted.append(request)
        self.cancel_events.append(cancel)
        return AnalysisResult(
            session_id="abc",
            status="done",
            faces=(Face(real_probability=0.9, face_path="/faces/0.jpg"),),
        )

    def fetch_status(self, session_id):
        if session_id == "missing":
            raise NotFoundError(f"Session with UUID {session_id} not found.", session_id=session_id)
        return StatusSnapshot(session_id=session_id, status="processing")

    def fetch_face_detail(self, session_id, face_index):
        self.face_calls.append((session_id, face_index))
        return Face(real_probability=0.1)


@pytest.fixture
def client() -> DummyClient:
    return DummyClient()


@pytest.fixture
def dispatcher(client) -> ToolDispatcher:
    return ToolDispatcher(client)


def test_registry_lists_all_tools():
    names = [spec.name for spec in ToolRegistry.list_specs()]
    assert names == ["analyze-image", "analyze", "check-session-status", "get-face-details"]


def test_tool_schemas_declare_required_arguments():
    specs = {spec.name: spec.describe() for spec in ToolRegistry.list_specs()}

    assert specs["analyze-image"]["inputSchema"]["required"] == ["imageBase64", "filename"]
    assert specs["get-face-details"]["inputSchema"]["required"] == ["sessionUuid", "faceIndex"]
    fmt = specs["analyze"]["inputSchema"]["properties"]["format"]
    assert fmt["enum"] == ["text", "json"]
    assert fmt["default"] == "text"


def test_register_and_unregister_custom_tool():
    spec = ToolSpec(
        name="echo",
        description="Echo",
        input_schema={"type": "object"},
        handler=lambda client, arguments, cancel=None: ToolOutput(str(arguments)),
    )
    ToolRegistry.register(spec)
    try:
        assert ToolRegistry.get("echo") is spec
    finally:
        ToolRegistry.unregister("echo")
    with pytest.raises(UnknownToolError):
        ToolRegistry.get("echo")


def test_unknown_tool(dispatcher):
    with pytest.raises(UnknownToolError) as excinfo:
        dispatcher.call("delete-everything", {})
    assert "analyze-image" in str(excinfo.value)


def test_analyze_image_decodes_and_submits(dispatcher, client):
    encoded = base64.b64encode(b"jpeg-bytes").decode("ascii")

    output = dispatcher.call(
        "analyze-image",
        {"imageBase64": f"data:image/jpeg;base64,{encoded}", "filename": "me.jpg"},
    )

    request = client.submitted[0]
    assert isinstance(request, ImageBytesRequest)
    assert request.image_bytes == b"jpeg-bytes"
    assert request.filename == "me.jpg"
    assert "* Verdict: **Likely Real**" in output.text
    assert output.as_content() == [{"type": "text", "text": output.text}]


def test_analyze_url_json_output(dispatcher, client):
    output = dispatcher.call("analyze", {"imageUrl": "https://x.test/a.jpg", "format": "json"})

    assert client.submitted == [ImageUrlRequest(image_url="https://x.test/a.jpg")]
    payload = json.loads(output.text)
    assert payload["faces"][0]["verdict"] == "Likely Real"
    assert payload["faces"][0]["face_image_url"] == "https://api.test/faces/0.jpg"


@pytest.mark.parametrize(
    ("name", "arguments"),
    [
        ("analyze-image", {"filename": "a.jpg"}),
        ("analyze-image", {"imageBase64": "QUJD"}),
        ("analyze-image", {"imageBase64": "QUJD", "filename": "a.jpg", "format": "xml"}),
        ("analyze", {}),
        ("analyze", {"imageUrl": "   "}),
        ("check-session-status", {}),
        ("get-face-details", {"sessionUuid": "abc"}),
        ("get-face-details", {"sessionUuid": "abc", "faceIndex": -1}),
        ("get-face-details", {"sessionUuid": "abc", "faceIndex": "1"}),
        ("get-face-details", {"faceIndex": 0}),
    ],
)
def test_invalid_arguments_fail_before_network(dispatcher, client, name, arguments):
    with pytest.raises(ValidationError):
        dispatcher.call(name, arguments)
    assert client.submitted == []
    assert client.face_calls == []


def test_check_session_status_text(dispatcher):
    output = dispatcher.call("check-session-status", {"sessionUuid": "abc"})
    assert output.text == "**Session Status for abc:**\n* Status: processing\n"


def test_check_session_status_not_found_propagates(dispatcher):
    with pytest.raises(NotFoundError) as excinfo:
        dispatcher.call("check-session-status", {"sessionUuid": "missing"})
    assert excinfo.value.session_id == "missing"


def test_get_face_details_accepts_integral_float(dispatcher, client):
    output = dispatcher.call("get-face-details", {"sessionUuid": "abc", "faceIndex": 1.0})

    assert client.face_calls == [("abc", 1)]
    assert output.text.startswith("**Details for Face 2 (Session: abc):**")
    assert "Likely Fake" in output.text


def test_dispatcher_forwards_cancel_event(dispatcher, client, fakes):
    event = fakes.Event()

    dispatcher.call("analyze", {"imageUrl": "https://x.test/a.jpg"}, cancel=event)

    assert client.cancel_events == [event]


def test_cancelling_a_tool_call_stops_polling(fakes, config):
    upload = ("POST", f"{config.base_url}/api/upload")
    status = ("GET", f"{config.base_url}/api/abc/status")
    http = fakes.Http(
        {
            upload: fakes.Response(payload={"uuid": "abc"}),
            status: fakes.Response(payload={"status": "processing"}),
        }
    )
    event = fakes.Event(cancel_after=1)
    encoded = base64.b64encode(b"jpeg-bytes").decode("ascii")

    with SessionClient(config, http=http) as session_client:
        with pytest.raises(AnalysisCancelledError) as excinfo:
            ToolDispatcher(session_client).call(
                "analyze-image",
                {"imageBase64": encoded, "filename": "me.jpg"},
                cancel=event,
            )

    assert excinfo.value.session_id == "abc"
    assert http.count(*status) == 1
    assert event.waits == [0.0]
