"""Domain models for chunks, embeddings, and batch progress tracking."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TextChunk(BaseModel):
    """A bounded span of page text, the unit sent to the embedding provider.

    Attributes
    ----------
    id:
        Freshly generated unique identifier.
    content:
        Trimmed, non-empty chunk text (may start with overlap words
        carried over from the previous chunk on the same page).
    source_document:
        File name of the document the chunk came from.
    page_number:
        1-based page the chunk was cut from.
    position:
        0-based ordinal of the chunk within its page.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    content: str = Field(min_length=1)
    source_document: str
    page_number: int = Field(ge=1)
    position: int = Field(ge=0)


class EmbeddingVector(BaseModel):
    """The embedding of one :class:`TextChunk`, with a back-reference to it.

    ``id`` reuses the chunk's identifier so that search hits can be traced
    back to the exact page and position they were cut from.
    """

    id: UUID
    embedding: list[float]
    text_content: str
    source_document: str
    page_number: int
    position: int

    @classmethod
    def from_chunk(cls, chunk: TextChunk, embedding: list[float]) -> EmbeddingVector:
        return cls(
            id=chunk.id,
            embedding=embedding,
            text_content=chunk.content,
            source_document=chunk.source_document,
            page_number=chunk.page_number,
            position=chunk.position,
        )


class EmbeddingCollection(BaseModel):
    """All embeddings produced for one processing batch.

    Attributes
    ----------
    id:
        The batch identifier.
    description:
        Free-text description supplied on submission.
    created_at:
        UTC timestamp of assembly.
    embedding_dimension:
        Dimension of every vector in :attr:`embeddings`.
    embedding_model:
        Provider / model identifier that produced the vectors.
    total_chunks:
        Number of embedded chunks.
    embeddings:
        Vectors in original chunk order.
    """

    id: str
    description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    embedding_dimension: int
    embedding_model: str
    total_chunks: int
    embeddings: list[EmbeddingVector] = Field(default_factory=list)


class BatchPhase(str, Enum):
    """Pipeline phases of a processing batch, in success-path order."""

    STARTED = "STARTED"
    PROCESSING = "PROCESSING"
    GENERATING_EMBEDDINGS = "GENERATING_EMBEDDINGS"
    SAVING_EMBEDDINGS = "SAVING_EMBEDDINGS"
    CREATING_VECTOR_INDEX = "CREATING_VECTOR_INDEX"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NOT_FOUND = "NOT_FOUND"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchPhase.COMPLETED, BatchPhase.FAILED)


# Success-path ordering; FAILED may follow any non-terminal phase.
PHASE_ORDER: tuple[BatchPhase, ...] = (
    BatchPhase.STARTED,
    BatchPhase.PROCESSING,
    BatchPhase.GENERATING_EMBEDDINGS,
    BatchPhase.SAVING_EMBEDDINGS,
    BatchPhase.CREATING_VECTOR_INDEX,
    BatchPhase.COMPLETED,
)


class BatchStatus(BaseModel):
    """Latest known progress of one processing batch.

    Attributes
    ----------
    batch_id:
        Opaque batch identifier returned by ``submit``.
    phase:
        Current :class:`BatchPhase`.
    processed_documents / total_documents:
        Document progress counters.
    processed_chunks:
        Number of chunks extracted so far.
    last_updated:
        UTC timestamp of the last transition.
    error:
        Failure reason, only set when ``phase`` is ``FAILED``.
    """

    batch_id: str
    phase: BatchPhase
    processed_documents: int = 0
    total_documents: int = 0
    processed_chunks: int = 0
    last_updated: datetime = Field(default_factory=_utcnow)
    error: str | None = None

    @classmethod
    def not_found(cls, batch_id: str) -> BatchStatus:
        return cls(batch_id=batch_id, phase=BatchPhase.NOT_FOUND)


class IndexDescriptor(BaseModel):
    """Handle to a built vector index."""

    index_id: str
    endpoint_id: str
    status: str = "DEPLOYED"
    created_at: datetime = Field(default_factory=_utcnow)


class ProcessingRequest(BaseModel):
    """Request body for submitting a batch of documents."""

    document_paths: list[str] = Field(min_length=1)
    description: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)


class ProcessingResponse(BaseModel):
    """Acknowledgement returned when a batch is accepted."""

    batch_id: str
    total_documents: int
    total_chunks: int = 0
    start_time: datetime = Field(default_factory=_utcnow)
    end_time: datetime | None = None
    status: str = BatchPhase.PROCESSING.value
    vector_search_index_name: str | None = None
    error_message: str | None = None
