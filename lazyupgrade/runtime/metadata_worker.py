"""Background worker that loads detail-modal metadata off the input loop."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

from ..model import PackageMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataRequest:
    """One metadata fetch for the package shown at state index ``row``."""

    request_id: int
    row: int
    name: str


@dataclass(frozen=True)
class MetadataResult:
    request: MetadataRequest
    metadata: PackageMetadata | None


class MetadataFetchScheduler:
    """Single-threaded latest-request-wins metadata scheduler.

    A request that is still pending when a newer one arrives is replaced; the
    one already being fetched always completes and is reported.
    """

    def __init__(self, fetch: Callable[[str], PackageMetadata | None]) -> None:
        self._fetch = fetch
        self._lock = threading.Lock()
        self._pending: MetadataRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._results: Queue[MetadataResult] = Queue()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return

            try:
                metadata = self._fetch(request.name)
            except Exception:
                logger.debug("metadata fetch for %s failed", request.name, exc_info=True)
                metadata = None
            self._results.put(MetadataResult(request=request, metadata=metadata))

    def schedule(self, *, row: int, name: str) -> int:
        """Queue/replace pending work and return the request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending = MetadataRequest(request_id=request_id, row=row, name=name)
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="lazyupgrade-metadata-fetch",
            daemon=True,
        )
        worker.start()
        return request_id

    def drain_results(self) -> list[MetadataResult]:
        out: list[MetadataResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "MetadataRequest",
    "MetadataResult",
    "MetadataFetchScheduler",
]
