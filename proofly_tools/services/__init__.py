"""Service layer coordinating remote analysis sessions."""

from .analyzer import BatchAnalyzer, BatchItemResult
from .normalizer import ResultNormalizer, face_image_url, verdict
from .session_client import SessionClient

__all__ = [
    "BatchAnalyzer",
    "BatchItemResult",
    "ResultNormalizer",
    "SessionClient",
    "face_image_url",
    "verdict",
]
