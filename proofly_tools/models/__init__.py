"""Data model for analysis requests, sessions and results."""

from .base import (
    NO_FACES_FOUND,
    AnalysisRequest,
    AnalysisResult,
    Face,
    ImageBytesRequest,
    ImageUrlRequest,
    Session,
    StatusKind,
    StatusSnapshot,
    UploadPayload,
    classify_status,
    normalize_status,
)

__all__ = [
    "NO_FACES_FOUND",
    "AnalysisRequest",
    "AnalysisResult",
    "Face",
    "ImageBytesRequest",
    "ImageUrlRequest",
    "Session",
    "StatusKind",
    "StatusSnapshot",
    "UploadPayload",
    "classify_status",
    "normalize_status",
]
