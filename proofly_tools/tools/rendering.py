"""Text and JSON renderings of analysis results."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from ..models.base import AnalysisResult, Face, StatusKind, StatusSnapshot, classify_status
from ..services.normalizer import face_image_url, verdict

REGISTRATION_FOOTER = (
    "For unlimited speed access and additional features, register at check.proofly.ai\n"
)


class OutputFormat(str, Enum):
    """Supported renderings of tool output."""

    TEXT = "text"
    JSON = "json"


# ----- Structured form ----------------------------------------------------


def face_to_dict(face: Face, *, base_url: str) -> dict[str, Any]:
    payload = face.as_payload()
    payload["verdict"] = verdict(face.real_probability)
    url = face_image_url(base_url, face.face_path)
    if url is not None:
        payload["face_image_url"] = url
    return payload


def result_to_dict(result: AnalysisResult, *, base_url: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"uuid": result.session_id, "status": result.status}
    if result.sha256:
        payload["sha256"] = result.sha256
    if result.message:
        payload["message"] = result.message
    payload["total_faces"] = result.face_count
    payload["faces"] = [face_to_dict(face, base_url=base_url) for face in result.faces]
    return payload


def status_to_dict(snapshot: StatusSnapshot, *, base_url: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"uuid": snapshot.session_id, "status": snapshot.status}
    if snapshot.message:
        payload["message"] = snapshot.message
    if snapshot.result is not None:
        payload["result"] = result_to_dict(snapshot.result, base_url=base_url)
    return payload


def render_json(payload: Any) -> str:
    return json.dumps(payload, indent=2)


# ----- Human-readable form ------------------------------------------------


def _face_lines(face: Face, *, base_url: str) -> list[str]:
    lines = [f"* Verdict: **{verdict(face.real_probability)}**"]
    probability = face.real_probability
    if probability is not None:
        real = probability * 100
        lines.append(f'* Probability "real": {real:.2f}%, "fake": {100 - real:.2f}%')
    if face.model_scores:
        lines.append("* Individual model results:")
        for index, score in face.model_scores:
            lines.append(f"  - Model {index}: {score * 100:.2f}%")
    url = face_image_url(base_url, face.face_path)
    if url is not None:
        lines.append(f"* Face image URL: {url}")
    return lines


def format_result_text(result: AnalysisResult, *, base_url: str) -> str:
    lines = [
        "**Image Analysis Results:**",
        f"* Session UUID: {result.session_id or 'N/A'}",
    ]
    if result.sha256:
        lines.append(f"* SHA256 hash: {result.sha256}")
    lines.append(f"* Status: {result.status or 'N/A'}")

    kind = classify_status(result.status)
    if result.message and kind is StatusKind.NO_FACES:
        lines.append(f"* Message: {result.message}")
    elif result.faces:
        lines.append(f"* Faces detected: {result.face_count}")
        lines.append("")
        for index, face in enumerate(result.faces, start=1):
            lines.append(f"**Face {index}:**")
            lines.extend(_face_lines(face, base_url=base_url))
            lines.append("")
    elif kind is StatusKind.SUCCEEDED:
        lines.append("* No faces detected in the image")
        lines.append("")
    elif not result.message:
        lines.append("* No specific face data available or an issue occurred during processing.")
        lines.append("")

    return "\n".join(lines) + "\n" + REGISTRATION_FOOTER


def format_status_text(snapshot: StatusSnapshot) -> str:
    lines = [
        f"**Session Status for {snapshot.session_id}:**",
        f"* Status: {snapshot.status or 'N/A'}",
    ]
    if snapshot.message:
        lines.append(f"* Message: {snapshot.message}")
    if snapshot.result is not None:
        lines.append("* Result available: Yes")
    return "\n".join(lines) + "\n"


def format_face_text(face: Face, *, index: int, session_id: str, base_url: str) -> str:
    lines = [f"**Details for Face {index + 1} (Session: {session_id}):**"]
    lines.extend(_face_lines(face, base_url=base_url))
    return "\n".join(lines) + "\n"


# ----- Dispatch -----------------------------------------------------------


def render_result(result: AnalysisResult, output_format: OutputFormat, *, base_url: str) -> str:
    if output_format is OutputFormat.JSON:
        return render_json(result_to_dict(result, base_url=base_url))
    return format_result_text(result, base_url=base_url)


def render_status(snapshot: StatusSnapshot, output_format: OutputFormat, *, base_url: str) -> str:
    if output_format is OutputFormat.JSON:
        return render_json(status_to_dict(snapshot, base_url=base_url))
    return format_status_text(snapshot)


def render_face(
    face: Face,
    output_format: OutputFormat,
    *,
    index: int,
    session_id: str,
    base_url: str,
) -> str:
    if output_format is OutputFormat.JSON:
        return render_json(face_to_dict(face, base_url=base_url))
    return format_face_text(face, index=index, session_id=session_id, base_url=base_url)
