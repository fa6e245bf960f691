"""Shared configuration loaded from environment / ``.env`` file."""

from __future__ import annotations

import tempfile

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Chunking
    chunk_size: int = Field(default=300, description="Maximum chunk length in characters")
    chunk_overlap: int = Field(default=50, description="Words carried over into the next chunk")

    # Embedding
    embedding_backend: str = Field(
        default="kserve",
        description="Embedding provider: 'kserve' (remote predict endpoint) or 'huggingface' (in-process)",
    )
    embedding_model: str = "text-embedding-004"
    embedding_dimension: int = 768
    embedding_endpoint: str = Field(
        default="http://localhost:8080/v1/models/text-embedding:predict",
        description=(
            "KServe v1 predict URL of the embedding model, e.g. "
            "'http://embedder.kubeflow-user.svc.cluster.local/v1/models/text-embedding:predict'"
        ),
    )
    embedding_request_timeout: int = 60
    embedding_batch_size: int = 5
    embedding_batch_delay_seconds: float = 0.5
    huggingface_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Artifact storage
    artifact_dir: str = Field(default_factory=tempfile.gettempdir)
    artifact_prefix: str = "document-embeddings"

    # Vector index (Chroma)
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    index_name_prefix: str = "document-index"
    endpoint_name_prefix: str = "document-endpoint"
    distance_metric: str = "cosine"
    upsert_batch_size: int = 5000

    # Processing
    max_workers: int = 4

    # Uploads
    upload_dir: str = Field(default_factory=tempfile.gettempdir)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton; import `settings` wherever needed.
settings = Settings()
