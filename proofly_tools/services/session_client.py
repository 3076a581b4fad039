"""HTTP client driving one upload, poll and fetch lifecycle against Proofly."""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import quote

import requests
from requests import Response

from ..config import AppConfig
from ..errors import (
    AnalysisCancelledError,
    NotFoundError,
    PollTimeoutError,
    TransportError,
    UploadError,
    ValidationError,
)
from ..models.base import (
    AnalysisRequest,
    AnalysisResult,
    Face,
    ImageBytesRequest,
    ImageUrlRequest,
    Session,
    StatusKind,
    StatusSnapshot,
    UploadPayload,
)
from ..utils.images import sniff_content_type
from ..utils.paths import (
    DEFAULT_CONTENT_TYPE,
    content_type_for_filename,
    filename_from_url,
    is_http_url,
)
from .normalizer import ResultNormalizer

logger = logging.getLogger(__name__)


class SessionClient:
    """Uploads images to the remote service and waits for their verdicts.

    A client holds no per-session state: every :meth:`submit` call creates a
    new remote session and polls it to completion. The underlying HTTP
    session is reused between calls and closed by :meth:`close`.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        http: requests.Session | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._owns_http = http is None
        self._http = http if http is not None else requests.Session()
        self._normalizer = ResultNormalizer(self.fetch_result)

    @property
    def config(self) -> AppConfig:
        return self._config

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----- Orchestration ---------------------------------------------------

    def submit(
        self,
        request: AnalysisRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> AnalysisResult:
        """Upload ``request`` and block until the remote analysis resolves.

        ``cancel`` may be set from another thread; the client then stops
        issuing requests and raises :class:`AnalysisCancelledError`.
        """

        cancel = cancel or threading.Event()
        payload = self.resolve_payload(request)
        if cancel.is_set():
            raise AnalysisCancelledError()
        session = self.upload(payload)
        snapshot, embedded = self._wait_for_completion(session, cancel)
        result = self._normalizer.resolve(snapshot, embedded)
        logger.info("Session %s resolved with status %s.", session.id, result.status)
        return result

    def resolve_payload(self, request: AnalysisRequest) -> UploadPayload:
        """Turn either request variant into bytes plus multipart metadata."""
        if isinstance(request, ImageBytesRequest):
            return self._payload_from_bytes(request)
        if isinstance(request, ImageUrlRequest):
            return self._payload_from_url(request)
        raise ValidationError(f"Unsupported analysis request: {type(request).__name__}")

    def upload(self, payload: UploadPayload) -> Session:
        url = f"{self._config.base_url}/api/upload"
        files = {"file": (payload.filename, payload.data, payload.content_type)}
        logger.info(
            "Uploading %s (%.2f KB, %s) to %s",
            payload.filename,
            len(payload.data) / 1024,
            payload.content_type,
            url,
        )
        try:
            response = self._request("POST", url, files=files)
            data = self._json(response)
        except TransportError as exc:
            raise UploadError(f"Failed to upload image: {exc}") from exc

        uuid = data.get("uuid") if isinstance(data, dict) else None
        if not isinstance(uuid, str) or not uuid:
            raise UploadError("No session UUID returned from Proofly API after upload.")
        logger.info("Received session UUID %s", uuid)
        return Session(id=uuid)

    def _wait_for_completion(
        self,
        session: Session,
        cancel: threading.Event,
    ) -> tuple[StatusSnapshot, AnalysisResult | None]:
        max_attempts = self._config.max_poll_attempts
        embedded: AnalysisResult | None = None
        last_status: str | None = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                self._pause(session.id, cancel)
            elif cancel.is_set():
                raise AnalysisCancelledError(session.id)

            logger.debug("Checking status for session %s, attempt %d", session.id, attempt)
            snapshot = self.fetch_status(session.id)
            last_status = snapshot.status
            if snapshot.result is not None:
                embedded = snapshot.result

            kind = snapshot.kind
            if kind.is_terminal:
                logger.info("Session %s reached status %s", session.id, snapshot.status)
                return snapshot, embedded
            if kind is StatusKind.UNKNOWN:
                logger.debug(
                    "Unrecognised status %r for session %s; continuing to poll.",
                    snapshot.status,
                    session.id,
                )

        raise PollTimeoutError(session.id, max_attempts, last_status)

    def _pause(self, session_id: str, cancel: threading.Event) -> None:
        if cancel.wait(self._config.poll_interval) or cancel.is_set():
            logger.info("Polling for session %s cancelled.", session_id)
            raise AnalysisCancelledError(session_id)

    # ----- Single queries --------------------------------------------------

    def fetch_status(self, session_id: str) -> StatusSnapshot:
        """Query the status endpoint once."""
        session_id = _require_session_id(session_id)
        url = f"{self._config.base_url}/api/{quote(session_id, safe='')}/status"
        data = self._json(self._request("GET", url, session_id=session_id))
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected status payload for session {session_id}.")
        return StatusSnapshot.from_payload(data, session_id=session_id)

    def fetch_result(self, session_id: str) -> AnalysisResult:
        """Retrieve the full analysis result of a session."""
        session_id = _require_session_id(session_id)
        url = f"{self._config.base_url}/api/{quote(session_id, safe='')}"
        data = self._json(self._request("GET", url, session_id=session_id))
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected result payload for session {session_id}.")
        return AnalysisResult.from_payload(data, session_id=session_id)

    def fetch_face_detail(self, session_id: str, face_index: int) -> Face:
        """Return one face of a freshly fetched result."""
        if isinstance(face_index, bool) or not isinstance(face_index, int) or face_index < 0:
            raise ValidationError("Face index must be a non-negative integer.")
        session_id = _require_session_id(session_id)
        result = self.fetch_result(session_id)
        if face_index >= len(result.faces):
            raise NotFoundError(
                f"Face with index {face_index} not found in session {session_id}. "
                f"Total faces: {len(result.faces)}.",
                session_id=session_id,
            )
        return result.faces[face_index]

    # ----- Payload resolution ----------------------------------------------

    def _payload_from_bytes(self, request: ImageBytesRequest) -> UploadPayload:
        if not request.image_bytes:
            raise ValidationError("Image payload must not be empty.")
        filename = (request.filename or "").strip()
        if not filename:
            raise ValidationError("A filename such as 'image.jpg' is required.")
        logger.info("Decoded image size: %.2f KB", len(request.image_bytes) / 1024)
        content_type = (
            request.content_type
            or content_type_for_filename(filename)
            or sniff_content_type(request.image_bytes)
            or DEFAULT_CONTENT_TYPE
        )
        return UploadPayload(
            data=bytes(request.image_bytes),
            filename=filename,
            content_type=content_type,
        )

    def _payload_from_url(self, request: ImageUrlRequest) -> UploadPayload:
        url = request.image_url.strip() if isinstance(request.image_url, str) else ""
        if not is_http_url(url):
            raise ValidationError(f"Image URL must be an absolute http(s) URL: {url!r}")

        logger.info("Downloading image from %s", url)
        response = self._request("GET", url, authenticated=False)
        data = response.content
        if not data:
            raise ValidationError(f"Image downloaded from {url} is empty.")
        logger.info("Image downloaded, size: %.2f KB", len(data) / 1024)

        filename = filename_from_url(url)
        header = response.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
        if header.startswith("image/"):
            content_type = header
        else:
            content_type = (
                content_type_for_filename(filename)
                or sniff_content_type(data)
                or header
                or DEFAULT_CONTENT_TYPE
            )
        return UploadPayload(data=data, filename=filename, content_type=content_type)

    # ----- HTTP helpers ----------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        session_id: str | None = None,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> Response:
        timeout = self._config.request_timeout
        headers = self._headers() if authenticated else {}
        try:
            response = self._http.request(method, url, headers=headers, timeout=timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise TransportError(f"{method} {url} timed out after {timeout}s.") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Failed to contact {url}: {exc}") from exc

        status_code = response.status_code
        if status_code == 404 and session_id is not None:
            raise NotFoundError(f"Session with UUID {session_id} not found.", session_id=session_id)
        if status_code >= 400:
            logger.warning("%s %s returned HTTP %s", method, url, status_code)
            raise TransportError(
                f"{method} {url} returned HTTP {status_code}: {_error_detail(response)}",
                status_code=status_code,
            )
        return response

    @staticmethod
    def _json(response: Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Proofly API returned a non-JSON payload: {response.text!r}"
            ) from exc


def _require_session_id(session_id: str) -> str:
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValidationError("A session UUID is required.")
    return session_id.strip()


def _error_detail(response: Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("detail", "message", "error"):
            value = payload.get(key)
            if value:
                return str(value)
    text = (getattr(response, "text", "") or "").strip()
    return text or str(getattr(response, "reason", "") or "no details")
