"""Chroma implementation of the index-builder abstraction.

Each processing batch gets its own collection, ``<index_prefix>-<batch_id>``,
filled with pre-computed vectors read back from the persisted artifact.
Chunk ids are used as vector ids, so rebuilding the same batch overwrites
rather than duplicates.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from docembed.config import settings
from docembed.exceptions import IndexBuildError, PersistenceError
from docembed.ingestion.models import EmbeddingCollection, IndexDescriptor
from docembed.storage.artifact_store import load_collection
from docembed.storage.base import IndexBuilder

logger = logging.getLogger(__name__)


class ChromaIndexBuilder(IndexBuilder):
    """Upsert a batch's embeddings into a dedicated Chroma collection.

    Parameters
    ----------
    host / port:
        Chroma server connection details.
    index_prefix:
        Prefix of the per-batch collection name.
    endpoint_prefix:
        Prefix of the reported endpoint id.
    distance_metric:
        ``"cosine"`` | ``"l2"`` | ``"ip"``
    upsert_batch_size:
        Max records per upsert call.
    client:
        Pre-built Chroma client; when *None* an ``HttpClient`` is created.
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        index_prefix: str = settings.index_name_prefix,
        endpoint_prefix: str = settings.endpoint_name_prefix,
        distance_metric: str = settings.distance_metric,
        upsert_batch_size: int = settings.upsert_batch_size,
        client: Any = None,
    ) -> None:
        if client is None:
            import chromadb

            client = chromadb.HttpClient(host=host, port=port)
        self._client = client
        self.index_prefix = index_prefix
        self.endpoint_prefix = endpoint_prefix
        self.distance_metric = distance_metric
        self.upsert_batch_size = upsert_batch_size

    def build(self, locator: str, batch_id: str) -> IndexDescriptor:
        try:
            collection = load_collection(locator)
        except PersistenceError as exc:
            raise IndexBuildError(f"Cannot load embeddings for batch {batch_id}: {exc}") from exc

        index_id = f"{self.index_prefix}-{batch_id}"
        try:
            target = self._client.get_or_create_collection(
                name=index_id,
                metadata={
                    "hnsw:space": self.distance_metric,
                    "batch_id": batch_id,
                    "embedding_model": collection.embedding_model,
                    "description": collection.description or "",
                },
            )
            batches = self._upsert(target, collection, batch_id)
        except Exception as exc:
            logger.error("Error creating vector index %s: %s", index_id, exc)
            raise IndexBuildError(f"Failed to build vector index {index_id}: {exc}") from exc

        logger.info(
            "Created vector index %s with %d vectors (%d upsert batches)",
            index_id, collection.total_chunks, batches,
        )
        return IndexDescriptor(
            index_id=index_id,
            endpoint_id=f"{self.endpoint_prefix}-{batch_id}",
            status="DEPLOYED",
        )

    def _upsert(self, target: Any, collection: EmbeddingCollection, batch_id: str) -> int:
        vectors = collection.embeddings
        t0 = time.monotonic()
        batches = 0
        for start in range(0, len(vectors), self.upsert_batch_size):
            window = vectors[start : start + self.upsert_batch_size]
            target.upsert(
                ids=[str(v.id) for v in window],
                embeddings=[v.embedding for v in window],
                documents=[v.text_content for v in window],
                # Chroma metadata values must be flat str/int/float/bool
                metadatas=[
                    {
                        "source": v.source_document,
                        "page": v.page_number,
                        "chunk_index": v.position,
                        "batch_id": batch_id,
                    }
                    for v in window
                ],
            )
            batches += 1
            logger.debug("  upserted batch %d (%d vectors)", batches, len(window))
        logger.debug("Upsert finished in %.1fs", time.monotonic() - t0)
        return batches
