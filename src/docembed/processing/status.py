"""Process-wide store of the latest status of every processing batch."""

from __future__ import annotations

import logging
import threading

from docembed.ingestion.models import BatchStatus

logger = logging.getLogger(__name__)


class StatusStore:
    """Thread-safe ``batch_id → BatchStatus`` map.

    Writes replace the whole entry (last write wins); readers may observe
    any intermediate phase.  Entries live for the lifetime of the process;
    there is no expiry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[str, BatchStatus] = {}

    def put(self, status: BatchStatus) -> None:
        with self._lock:
            self._statuses[status.batch_id] = status
        logger.debug("Updated processing status for batch %s: %s", status.batch_id, status.phase.value)

    def get(self, batch_id: str) -> BatchStatus:
        """Return the stored status, or a ``NOT_FOUND`` sentinel."""
        with self._lock:
            status = self._statuses.get(batch_id)
        return status if status is not None else BatchStatus.not_found(batch_id)

    def __contains__(self, batch_id: object) -> bool:
        with self._lock:
            return batch_id in self._statuses

    def __len__(self) -> int:
        with self._lock:
            return len(self._statuses)
