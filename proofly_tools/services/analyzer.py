"""Run several independent analysis sessions on a worker pool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from ..config import AppConfig
from ..errors import ProoflyError
from ..models.base import AnalysisRequest, AnalysisResult, ImageBytesRequest, ImageUrlRequest
from .session_client import SessionClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
ClientFactory = Callable[[AppConfig], SessionClient]


@dataclass(slots=True)
class BatchItemResult:
    """Outcome of one request: either a result or an error message."""

    label: str
    result: AnalysisResult | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def request_label(request: AnalysisRequest) -> str:
    if isinstance(request, ImageUrlRequest):
        return request.image_url
    if isinstance(request, ImageBytesRequest):
        return request.filename
    return repr(request)


class BatchAnalyzer:
    """High-level orchestration for analysing many images at once."""

    def __init__(
        self,
        config: AppConfig,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or SessionClient

    def analyze_many(
        self,
        requests: Sequence[AnalysisRequest],
        *,
        progress_callback: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> list[BatchItemResult]:
        """Submit every request and return outcomes in input order."""
        if not requests:
            return []

        cancel = cancel or threading.Event()
        total = len(requests)
        outcomes: list[BatchItemResult | None] = [None] * total

        def _worker(request: AnalysisRequest) -> BatchItemResult:
            label = request_label(request)
            try:
                with self._client_factory(self.config) as client:
                    result = client.submit(request, cancel=cancel)
            except ProoflyError as exc:
                logger.warning("Analysis of %s failed: %s", label, exc)
                return BatchItemResult(label=label, error_message=str(exc))
            return BatchItemResult(label=label, result=result)

        with ThreadPoolExecutor(max_workers=self.config.max_concurrency) as executor:
            futures = {
                executor.submit(_worker, request): index for index, request in enumerate(requests)
            }
            try:
                for completed, future in enumerate(as_completed(futures), start=1):
                    index = futures[future]
                    outcome = future.result()
                    outcomes[index] = outcome
                    if progress_callback:
                        progress_callback(completed, total, outcome.label)
            except BaseException:
                cancel.set()
                executor.shutdown(wait=False, cancel_futures=True)
                raise

        return [outcome for outcome in outcomes if outcome is not None]
