"""Top-level package for the Proofly deepfake analysis tools."""

from .config import AppConfig
from .errors import ProoflyError
from .models.base import AnalysisResult, ImageBytesRequest, ImageUrlRequest
from .services.analyzer import BatchAnalyzer
from .services.session_client import SessionClient
from .settings_store import SettingsStore
from .tools.registry import ToolDispatcher

__all__ = [
    "AnalysisResult",
    "AppConfig",
    "BatchAnalyzer",
    "ImageBytesRequest",
    "ImageUrlRequest",
    "ProoflyError",
    "SessionClient",
    "SettingsStore",
    "ToolDispatcher",
]
