"""Abstract collaborators for persisting embeddings and building indexes.

Adding a new backend (GCS, S3, Pinecone, Vertex AI Vector Search …) only
requires subclassing :class:`ArtifactStore` or :class:`IndexBuilder`.
The orchestrator is backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docembed.ingestion.models import EmbeddingCollection, IndexDescriptor


class ArtifactStore(ABC):
    """Durable storage for finished embedding collections."""

    @abstractmethod
    def persist(self, collection: EmbeddingCollection) -> str:
        """Write *collection* and return a URI-like locator for it.

        Raises
        ------
        PersistenceError
            When the artifact cannot be written or uploaded.
        """
        ...


class IndexBuilder(ABC):
    """Builds a searchable vector index from a persisted collection."""

    @abstractmethod
    def build(self, locator: str, batch_id: str) -> IndexDescriptor:
        """Create (and deploy) an index over the artifact at *locator*.

        Parameters
        ----------
        locator:
            Locator previously returned by :meth:`ArtifactStore.persist`.
        batch_id:
            Batch the index belongs to; used to derive unique names.

        Raises
        ------
        IndexBuildError
            When index or endpoint construction fails.
        """
        ...
