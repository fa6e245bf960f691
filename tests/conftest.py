"""Shared pytest configuration, in-memory collaborators, and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from docembed.exceptions import EmbeddingProviderError, ExtractionError
from docembed.ingestion.chunker import SentenceChunker
from docembed.ingestion.embedder import EmbeddingBatcher, EmbeddingProvider
from docembed.ingestion.loader import TextExtractionSource
from docembed.ingestion.models import BatchStatus, EmbeddingCollection, IndexDescriptor
from docembed.processing.orchestrator import BatchOrchestrator
from docembed.processing.status import StatusStore
from docembed.storage.base import ArtifactStore, IndexBuilder


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ─────────────────────────────────────────────────────────────


class InlineExecutor(Executor):
    """Runs submitted callables immediately on the calling thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # noqa: BLE001
            future.set_exception(exc)
        return future


class FakeExtractor(TextExtractionSource):
    """Returns canned pages per document path."""

    def __init__(self, pages: dict[str, list[str]] | None = None, failing: set[str] | None = None) -> None:
        self.pages = pages or {}
        self.failing = failing or set()
        self.calls: list[str] = []

    def extract_pages(self, document_path: str) -> list[str]:
        self.calls.append(str(document_path))
        if str(document_path) in self.failing:
            raise ExtractionError(f"Document not found: {document_path}")
        return self.pages.get(str(document_path), ["Default page text. Another sentence."])


class FakeProvider(EmbeddingProvider):
    """Deterministic provider answering in the strict prediction schema.

    ``fail_on_call`` makes the n-th (1-based) call raise.
    """

    def __init__(self, dim: int = 3, fail_on_call: int | None = None) -> None:
        super().__init__("fake-embedding-model")
        self.dim = dim
        self.fail_on_call = fail_on_call
        self.calls: list[list[dict[str, Any]]] = []

    def predict(self, instances: list[dict[str, Any]]) -> list[Any]:
        self.calls.append(instances)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise EmbeddingProviderError("provider unavailable")
        return [
            {"embeddings": {"values": [float(len(i["content"]))] + [0.5] * (self.dim - 1)}}
            for i in instances
        ]


class FakeArtifactStore(ArtifactStore):
    def __init__(self) -> None:
        self.persisted: list[EmbeddingCollection] = []

    def persist(self, collection: EmbeddingCollection) -> str:
        self.persisted.append(collection)
        return f"memory://{collection.id}"


class FakeIndexBuilder(IndexBuilder):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def build(self, locator: str, batch_id: str) -> IndexDescriptor:
        self.calls.append((locator, batch_id))
        if self.error is not None:
            raise self.error
        return IndexDescriptor(index_id=f"index-{batch_id}", endpoint_id=f"endpoint-{batch_id}")


class RecordingStatusStore(StatusStore):
    """Status store that also keeps every write, in order."""

    def __init__(self) -> None:
        super().__init__()
        self.history: list[BatchStatus] = []

    def put(self, status: BatchStatus) -> None:
        self.history.append(status)
        super().put(status)

    def phases(self, batch_id: str) -> list[str]:
        return [s.phase.value for s in self.history if s.batch_id == batch_id]


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def status_store() -> RecordingStatusStore:
    return RecordingStatusStore()


@pytest.fixture()
def make_orchestrator(status_store: RecordingStatusStore) -> Callable[..., BatchOrchestrator]:
    """Factory building an orchestrator from fakes; keyword overrides win."""

    def _make(**overrides: Any) -> BatchOrchestrator:
        provider = overrides.pop("provider", FakeProvider())
        kwargs: dict[str, Any] = {
            "extractor": FakeExtractor(),
            "batcher": EmbeddingBatcher(provider, batch_size=2, delay_seconds=0),
            "artifact_store": FakeArtifactStore(),
            "index_builder": FakeIndexBuilder(),
            "chunker": SentenceChunker(chunk_size=40, chunk_overlap=2),
            "status_store": status_store,
            "executor": InlineExecutor(),
        }
        kwargs.update(overrides)
        return BatchOrchestrator(**kwargs)

    return _make
