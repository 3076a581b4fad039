"""Data types exchanged between the session client and its callers."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from ..utils.text import decode_base64_image

_MODEL_SCORE_PATTERN = re.compile(r"^is_real_model_(\d+)$")


class StatusKind(str, Enum):
    """How a remote status value affects the polling loop."""

    ACTIVE = "active"
    SUCCEEDED = "succeeded"
    NO_FACES = "no_faces"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self not in (StatusKind.ACTIVE, StatusKind.UNKNOWN)


NO_FACES_FOUND = "no_faces_found"

_STATUS_KINDS = {
    "pending": StatusKind.ACTIVE,
    "processing": StatusKind.ACTIVE,
    "in_progress": StatusKind.ACTIVE,
    "queued": StatusKind.ACTIVE,
    "done": StatusKind.SUCCEEDED,
    "completed": StatusKind.SUCCEEDED,
    NO_FACES_FOUND: StatusKind.NO_FACES,
    "error": StatusKind.FAILED,
    "failed": StatusKind.FAILED,
}


def normalize_status(value: object) -> str:
    """Fold spelling variants such as ``"In Progress"`` into ``"in_progress"``."""
    if not isinstance(value, str):
        return ""
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


def classify_status(value: object) -> StatusKind:
    """Map a raw status string onto a :class:`StatusKind`."""
    return _STATUS_KINDS.get(normalize_status(value), StatusKind.UNKNOWN)


@dataclass(slots=True, frozen=True)
class ImageBytesRequest:
    """An image supplied directly as bytes."""

    image_bytes: bytes
    filename: str
    content_type: str | None = None

    @classmethod
    def from_base64(cls, image_base64: str, filename: str) -> ImageBytesRequest:
        """Decode base64 data, honouring an optional ``data:image/...;base64,`` prefix."""
        data, mime = decode_base64_image(image_base64)
        return cls(image_bytes=data, filename=filename, content_type=mime)


@dataclass(slots=True, frozen=True)
class ImageUrlRequest:
    """An image the client downloads before uploading it."""

    image_url: str


AnalysisRequest = Union[ImageBytesRequest, ImageUrlRequest]


@dataclass(slots=True, frozen=True)
class UploadPayload:
    """Bytes plus multipart metadata, common to every request variant."""

    data: bytes
    filename: str
    content_type: str


@dataclass(slots=True, frozen=True)
class Session:
    """One remote analysis job."""

    id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True, frozen=True)
class Face:
    """A detected face with its ensemble score and per-model scores."""

    real_probability: float | None = None
    model_scores: tuple[tuple[int, float], ...] = ()
    face_path: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Face:
        scores: list[tuple[int, float]] = []
        for key, value in payload.items():
            match = _MODEL_SCORE_PATTERN.match(str(key))
            if match and _is_number(value):
                scores.append((int(match.group(1)), float(value)))
        scores.sort()
        probability = payload.get("ansamble")
        face_path = payload.get("face_path")
        return cls(
            real_probability=float(probability) if _is_number(probability) else None,
            model_scores=tuple(scores),
            face_path=face_path if isinstance(face_path, str) and face_path else None,
            raw=dict(payload),
        )

    def as_payload(self) -> dict[str, Any]:
        """Return the face as the API sent it, or rebuilt from its fields."""
        if self.raw:
            return dict(self.raw)
        payload: dict[str, Any] = {}
        if self.real_probability is not None:
            payload["ansamble"] = self.real_probability
        for index, score in self.model_scores:
            payload[f"is_real_model_{index}"] = score
        if self.face_path is not None:
            payload["face_path"] = self.face_path
        return payload


@dataclass(slots=True, frozen=True)
class AnalysisResult:
    """Final outcome of one analysis session."""

    session_id: str
    status: str
    faces: tuple[Face, ...] = ()
    message: str | None = None
    sha256: str | None = None
    total_faces: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, session_id: str = "") -> AnalysisResult:
        raw_faces = payload.get("faces")
        faces: tuple[Face, ...] = ()
        if isinstance(raw_faces, list):
            faces = tuple(
                Face.from_payload(item) for item in raw_faces if isinstance(item, Mapping)
            )
        total = payload.get("total_faces")
        uuid = payload.get("uuid")
        return cls(
            session_id=uuid if isinstance(uuid, str) and uuid else session_id,
            status=str(payload.get("status") or ""),
            faces=faces,
            message=_optional_str(payload.get("message")),
            sha256=_optional_str(payload.get("sha256")),
            total_faces=int(total) if _is_number(total) else None,
        )

    @property
    def face_count(self) -> int:
        return self.total_faces or len(self.faces)


@dataclass(slots=True, frozen=True)
class StatusSnapshot:
    """A single answer from the status endpoint."""

    session_id: str
    status: str
    message: str | None = None
    result: AnalysisResult | None = None

    @property
    def kind(self) -> StatusKind:
        return classify_status(self.status)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, session_id: str) -> StatusSnapshot:
        embedded = payload.get("result")
        result = None
        if isinstance(embedded, Mapping) and embedded:
            result = AnalysisResult.from_payload(embedded, session_id=session_id)
        return cls(
            session_id=session_id,
            status=str(payload.get("status") or ""),
            message=_optional_str(payload.get("message")),
            result=result,
        )


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None
