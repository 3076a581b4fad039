"""Registry of callable tools exposed by the adapter."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from importlib import import_module
from typing import TYPE_CHECKING, Any, Dict

from ..errors import ProoflyError, UnknownToolError

if TYPE_CHECKING:
    from ..services.session_client import SessionClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolOutput:
    """Rendered output of one tool invocation."""

    text: str

    def as_content(self) -> list[dict[str, str]]:
        return [{"type": "text", "text": self.text}]


Handler = Callable[..., ToolOutput]


@dataclass(slots=True)
class ToolSpec:
    """Name, description and JSON schema of a tool plus the function serving it."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: Handler = field(repr=False)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Tracks available tools and lazily imports the modules defining them."""

    _tools: Dict[str, ToolSpec] = {}
    _bootstrap_complete: bool = False

    @classmethod
    def register(cls, spec: ToolSpec) -> None:
        """Register a tool under its name."""
        cls._tools[spec.name] = spec

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._tools.pop(name, None)

    @classmethod
    def ensure_bootstrapped(cls) -> None:
        if cls._bootstrap_complete:
            return
        import_module("proofly_tools.tools.handlers")
        cls._bootstrap_complete = True

    @classmethod
    def list_specs(cls) -> list[ToolSpec]:
        cls.ensure_bootstrapped()
        return list(cls._tools.values())

    @classmethod
    def get(cls, name: str) -> ToolSpec:
        cls.ensure_bootstrapped()
        try:
            return cls._tools[name]
        except KeyError as exc:
            available = ", ".join(sorted(cls._tools))
            raise UnknownToolError(f"Unknown tool '{name}'. Available: {available}") from exc


class ToolDispatcher:
    """Maps a tool invocation onto the session client."""

    def __init__(self, client: SessionClient) -> None:
        self._client = client

    def call(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> ToolOutput:
        """Run tool ``name``; ``cancel`` stops any status polling it starts."""
        spec = ToolRegistry.get(name)
        logger.info("Calling tool %s", name)
        try:
            return spec.handler(self._client, arguments or {}, cancel=cancel)
        except ProoflyError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            raise
