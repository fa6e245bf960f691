"""
Processing — asynchronous batch orchestration and status tracking.

Public API
----------
- :class:`BatchOrchestrator` — submit batches and query their progress.
- :func:`build_orchestrator` — orchestrator wired from global settings.
- :class:`StatusStore` — thread-safe latest-status map.
"""

from docembed.processing.orchestrator import BatchOrchestrator, build_orchestrator
from docembed.processing.status import StatusStore

__all__ = [
    "BatchOrchestrator",
    "StatusStore",
    "build_orchestrator",
]
