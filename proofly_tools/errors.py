"""Typed failures raised while orchestrating a remote analysis session."""

from __future__ import annotations


class ProoflyError(RuntimeError):
    """Base class for every failure surfaced to callers."""


class ValidationError(ProoflyError):
    """Raised when required input is missing or malformed."""


class UploadError(ProoflyError):
    """Raised when an image upload does not yield a session identifier."""


class TransportError(ProoflyError):
    """Raised for network or HTTP failures other than a missing session."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ProoflyError):
    """Raised when the remote service does not know a session or face."""

    def __init__(self, message: str, *, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id


class PollTimeoutError(ProoflyError):
    """Raised when a session is still running after the last allowed poll."""

    def __init__(self, session_id: str, attempts: int, status: str | None) -> None:
        super().__init__(
            f"Session {session_id} did not finish after {attempts} status checks "
            f"(last status: {status or 'unknown'})."
        )
        self.session_id = session_id
        self.attempts = attempts
        self.status = status


class AnalysisIncompleteError(ProoflyError):
    """Raised when a session stops without a result that can be interpreted."""

    def __init__(self, session_id: str, status: str | None) -> None:
        super().__init__(
            f"Analysis for session {session_id} did not complete successfully. "
            f"Last status: {status or 'unknown'}"
        )
        self.session_id = session_id
        self.status = status


class AnalysisCancelledError(ProoflyError):
    """Raised when polling stops because the caller asked it to."""

    def __init__(self, session_id: str | None = None) -> None:
        target = f"session {session_id}" if session_id else "analysis"
        super().__init__(f"Cancelled {target} before it completed.")
        self.session_id = session_id


class UnknownToolError(ProoflyError):
    """Raised when a tool name is not registered."""
