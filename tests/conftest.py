"""Shared test doubles for HTTP sessions and cancellation events."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest

from proofly_tools.config import AppConfig

BASE_URL = "https://api.test"

_NO_JSON = object()


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = _NO_JSON,
        *,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
        text: str | None = None,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.headers = headers or {}
        self.reason = "Reason"
        if text is not None:
            self.text = text
        elif payload is not _NO_JSON:
            self.text = json.dumps(payload)
        else:
            self.text = ""

    def json(self) -> Any:
        if self._payload is _NO_JSON:
            raise ValueError("No JSON body")
        return self._payload


class FakeHttp:
    """Replays queued responses per ``(method, url)`` and records every call.

    The last queued item of a route is repeated once the others are used up.
    """

    def __init__(self, routes: dict[tuple[str, str], Any]) -> None:
        self.routes = {
            key: list(value) if isinstance(value, list) else [value]
            for key, value in routes.items()
        }
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        queue = self.routes[(method, url)]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def count(self, method: str, url: str) -> int:
        return sum(1 for call in self.calls if call[0] == method and call[1] == url)

    def close(self) -> None:
        self.closed = True


class RecordingEvent:
    """Stands in for ``threading.Event`` without sleeping."""

    def __init__(self, *, cancel_after: int | None = None) -> None:
        self.waits: list[float | None] = []
        self._cancel_after = cancel_after
        self._set = False

    def wait(self, timeout: float | None = None) -> bool:
        self.waits.append(timeout)
        if self._cancel_after is not None and len(self.waits) >= self._cancel_after:
            self._set = True
        return self._set

    def is_set(self) -> bool:
        return self._set

    def set(self) -> None:
        self._set = True


@pytest.fixture
def fakes() -> SimpleNamespace:
    return SimpleNamespace(Response=FakeResponse, Http=FakeHttp, Event=RecordingEvent)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(base_url=BASE_URL, poll_interval=0.0, max_poll_attempts=5)
