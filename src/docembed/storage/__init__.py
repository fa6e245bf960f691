"""
Storage — durable persistence of embedding collections and vector-index
construction.

Public surface
--------------
- :class:`ArtifactStore` / :class:`IndexBuilder` — abstract collaborators.
- :class:`LocalArtifactStore` — JSON files on local disk.
- :class:`ChromaIndexBuilder` — default Chroma backend.
"""

from docembed.storage.artifact_store import LocalArtifactStore, load_collection
from docembed.storage.base import ArtifactStore, IndexBuilder

__all__ = [
    "ArtifactStore",
    "ChromaIndexBuilder",
    "IndexBuilder",
    "LocalArtifactStore",
    "load_collection",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaIndexBuilder to avoid pulling in chromadb at import time."""
    if name == "ChromaIndexBuilder":
        from docembed.storage.chroma_store import ChromaIndexBuilder

        return ChromaIndexBuilder
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
