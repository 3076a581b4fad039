"""Collapse the terminal states of a session into one result shape."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import AnalysisIncompleteError
from ..models.base import NO_FACES_FOUND, AnalysisResult, StatusKind, StatusSnapshot

logger = logging.getLogger(__name__)

NO_FACES_MESSAGE = "No faces detected in the image."

LIKELY_REAL = "Likely Real"
LIKELY_FAKE = "Likely Fake"
UNCERTAIN = "Uncertain"
UNCERTAIN_NO_SCORE = "Uncertain (no score)"

ResultFetcher = Callable[[str], AnalysisResult]


def verdict(probability: float | None) -> str:
    """Classify the probability that a face is real."""
    if probability is None:
        return UNCERTAIN_NO_SCORE
    if probability > 0.8:
        return LIKELY_REAL
    if probability < 0.2:
        return LIKELY_FAKE
    return UNCERTAIN


def face_image_url(base_url: str, face_path: str | None) -> str | None:
    """Build the public URL of a cropped face image."""
    if not face_path:
        return None
    url = f"{base_url}{face_path}"
    # Face paths from the API may contain a stray "ai./" segment.
    return url.replace("ai./", "ai/", 1)


def no_faces_result(session_id: str) -> AnalysisResult:
    return AnalysisResult(
        session_id=session_id,
        status=NO_FACES_FOUND,
        faces=(),
        message=NO_FACES_MESSAGE,
        total_faces=0,
    )


class ResultNormalizer:
    """Turn the last status snapshot of a session into an :class:`AnalysisResult`."""

    def __init__(self, fetch_result: ResultFetcher) -> None:
        self._fetch_result = fetch_result

    def resolve(
        self,
        snapshot: StatusSnapshot,
        embedded: AnalysisResult | None = None,
    ) -> AnalysisResult:
        """Resolve a terminal snapshot.

        ``embedded`` is a result captured from an earlier status response of the
        session; it is used when the final snapshot carries none.
        """

        kind = snapshot.kind
        if not kind.is_terminal:
            raise ValueError(f"Status {snapshot.status!r} is not terminal.")

        result = snapshot.result or embedded
        if result is not None:
            return result

        session_id = snapshot.session_id
        if kind is StatusKind.NO_FACES:
            logger.info("No faces found in session %s.", session_id)
            return no_faces_result(session_id)
        if kind is StatusKind.SUCCEEDED:
            logger.info("Fetching final result for session %s", session_id)
            return self._fetch_result(session_id)
        raise AnalysisIncompleteError(session_id, snapshot.status)
