"""Batch orchestrator — drives one document batch through every phase.

Phase sequence (one status update per phase)::

    STARTED → PROCESSING (once per document) → GENERATING_EMBEDDINGS
            → SAVING_EMBEDDINGS → CREATING_VECTOR_INDEX → COMPLETED

Any exception inside a batch's unit of work ends it in ``FAILED`` with the
error message and the last known counters.  Artifacts written before the
failure are left in place.

Usage::

    from docembed.processing.orchestrator import build_orchestrator

    orchestrator = build_orchestrator()
    batch_id = orchestrator.submit(["/data/policy.pdf"], "car policies")
    orchestrator.get_status(batch_id).phase
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path

from docembed.config import settings
from docembed.ingestion.chunker import SentenceChunker
from docembed.ingestion.embedder import EmbeddingBatcher, get_embedding_provider
from docembed.ingestion.loader import FileTextExtractor, TextExtractionSource
from docembed.ingestion.models import (
    BatchPhase,
    BatchStatus,
    EmbeddingCollection,
    IndexDescriptor,
    TextChunk,
)
from docembed.processing.status import StatusStore
from docembed.storage.base import ArtifactStore, IndexBuilder

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Runs processing batches asynchronously on a bounded worker pool.

    Parameters
    ----------
    extractor:
        Source of per-page document text.
    batcher:
        Embedding batcher wrapping the configured provider.
    artifact_store:
        Where finished embedding collections are persisted.
    index_builder:
        Builds the vector index over a persisted collection.
    chunker:
        Sentence chunker; defaults to one built from settings.
    status_store:
        Shared status store; a private one is created when *None*.
    embedding_dimension:
        Recorded on empty collections, where it cannot be read off a vector.
    max_workers:
        Worker-pool size when no *executor* is given.
    executor:
        Pre-built executor (e.g. a synchronous one in tests).
    """

    def __init__(
        self,
        extractor: TextExtractionSource,
        batcher: EmbeddingBatcher,
        artifact_store: ArtifactStore,
        index_builder: IndexBuilder,
        *,
        chunker: SentenceChunker | None = None,
        status_store: StatusStore | None = None,
        embedding_dimension: int = settings.embedding_dimension,
        max_workers: int = settings.max_workers,
        executor: Executor | None = None,
    ) -> None:
        self._extractor = extractor
        self._batcher = batcher
        self._artifact_store = artifact_store
        self._index_builder = index_builder
        self._chunker = chunker or SentenceChunker()
        self._status_store = status_store if status_store is not None else StatusStore()
        self._embedding_dimension = embedding_dimension
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="batch"
        )

    # -- public API -----------------------------------------------------------

    def submit(
        self,
        document_paths: list[str],
        description: str = "",
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Accept a batch, record ``STARTED``, and process it in the background.

        Returns the new batch id without waiting for any pipeline phase.

        Raises
        ------
        ValueError
            If *document_paths* is empty.
        RuntimeError
            If the worker pool has been shut down; the batch is recorded as
            ``FAILED`` first.
        """
        paths = list(document_paths)
        if not paths:
            raise ValueError("document_paths must contain at least one path")
        batch_id = str(uuid.uuid4())
        self._record(batch_id, BatchPhase.STARTED, 0, len(paths), 0)
        logger.info(
            "Starting processing batch %s with %d files (metadata=%s)",
            batch_id, len(paths), metadata or {},
        )
        try:
            self._executor.submit(self.run_batch, batch_id, paths, description, metadata)
        except RuntimeError as exc:
            logger.error("Could not dispatch batch %s: %s", batch_id, exc)
            self._record(batch_id, BatchPhase.FAILED, 0, len(paths), 0, error=str(exc))
            raise
        return batch_id

    def get_status(self, batch_id: str) -> BatchStatus:
        """Return the latest status; ``NOT_FOUND`` for unknown ids."""
        return self._status_store.get(batch_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for running batches."""
        self._executor.shutdown(wait=wait)

    # -- unit of work ---------------------------------------------------------

    def run_batch(
        self,
        batch_id: str,
        document_paths: list[str],
        description: str = "",
        metadata: dict[str, str] | None = None,
    ) -> IndexDescriptor | None:
        """Process one batch synchronously, recording every phase.

        Returns the index descriptor on success and *None* on failure; the
        failure reason is only visible through :meth:`get_status`.
        """
        total = len(document_paths)
        processed_docs = 0
        all_chunks: list[TextChunk] = []

        try:
            for document_path in document_paths:
                logger.info("Processing document: %s", document_path)
                pages = self._extractor.extract_pages(document_path)
                all_chunks.extend(self._chunker.extract(pages, Path(document_path).name))
                processed_docs += 1
                self._record(batch_id, BatchPhase.PROCESSING, processed_docs, total, len(all_chunks))

            self._record(batch_id, BatchPhase.GENERATING_EMBEDDINGS, processed_docs, total, len(all_chunks))
            embeddings = self._batcher.embed(all_chunks)

            collection = EmbeddingCollection(
                id=batch_id,
                description=description,
                embedding_dimension=(
                    len(embeddings[0].embedding) if embeddings else self._embedding_dimension
                ),
                embedding_model=self._batcher.model_name,
                total_chunks=len(embeddings),
                embeddings=embeddings,
            )

            self._record(batch_id, BatchPhase.SAVING_EMBEDDINGS, processed_docs, total, len(all_chunks))
            locator = self._artifact_store.persist(collection)

            self._record(batch_id, BatchPhase.CREATING_VECTOR_INDEX, processed_docs, total, len(all_chunks))
            descriptor = self._index_builder.build(locator, batch_id)

            self._record(batch_id, BatchPhase.COMPLETED, processed_docs, total, len(all_chunks))
            logger.info(
                "Successfully processed batch %s. Created vector index: %s",
                batch_id, descriptor.index_id,
            )
            return descriptor

        except Exception as exc:
            logger.exception("Error processing documents for batch %s", batch_id)
            self._record(
                batch_id, BatchPhase.FAILED, processed_docs, total, len(all_chunks), error=str(exc)
            )
            return None

    # -- internals ------------------------------------------------------------

    def _record(
        self,
        batch_id: str,
        phase: BatchPhase,
        processed_documents: int,
        total_documents: int,
        processed_chunks: int,
        *,
        error: str | None = None,
    ) -> None:
        self._status_store.put(
            BatchStatus(
                batch_id=batch_id,
                phase=phase,
                processed_documents=processed_documents,
                total_documents=total_documents,
                processed_chunks=processed_chunks,
                error=error,
            )
        )


def build_orchestrator(status_store: StatusStore | None = None) -> BatchOrchestrator:
    """Wire the default collaborators from the global settings."""
    from docembed.storage.artifact_store import LocalArtifactStore
    from docembed.storage.chroma_store import ChromaIndexBuilder

    return BatchOrchestrator(
        extractor=FileTextExtractor(),
        batcher=EmbeddingBatcher(get_embedding_provider()),
        artifact_store=LocalArtifactStore(),
        index_builder=ChromaIndexBuilder(),
        status_store=status_store,
    )
