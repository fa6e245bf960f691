"""Local-disk artifact store for embedding collections."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from urllib.parse import unquote, urlparse

from pydantic import ValidationError

from docembed.config import settings
from docembed.exceptions import PersistenceError
from docembed.ingestion.models import EmbeddingCollection
from docembed.storage.base import ArtifactStore

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class LocalArtifactStore(ArtifactStore):
    """Write each collection as one JSON file and return its ``file://`` URI.

    Parameters
    ----------
    directory:
        Target directory (created on first write).
    prefix:
        File-name prefix; files are named ``<prefix>_<batch>_<timestamp>.json``.
    """

    def __init__(
        self,
        directory: str | Path = settings.artifact_dir,
        *,
        prefix: str = settings.artifact_prefix,
    ) -> None:
        self.directory = Path(directory)
        self.prefix = prefix

    def persist(self, collection: EmbeddingCollection) -> str:
        timestamp = datetime.now().strftime(_TIMESTAMP_FORMAT)
        out_path = self.directory / f"{self.prefix}_{collection.id}_{timestamp}.json"
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(collection.model_dump_json(), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write embeddings to {out_path}: {exc}") from exc

        logger.info(
            "Saved %d embeddings for batch %s to %s",
            collection.total_chunks, collection.id, out_path,
        )
        return out_path.resolve().as_uri()


def load_collection(locator: str) -> EmbeddingCollection:
    """Read back a collection written by :class:`LocalArtifactStore`.

    Raises
    ------
    PersistenceError
        When *locator* is not a readable ``file://`` artifact.
    """
    parsed = urlparse(locator)
    if parsed.scheme not in ("file", ""):
        raise PersistenceError(f"Unsupported artifact locator scheme: {locator!r}")
    path = Path(unquote(parsed.path)) if parsed.scheme else Path(locator)

    try:
        return EmbeddingCollection.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PersistenceError(f"Failed to read embeddings artifact {path}: {exc}") from exc
    except ValidationError as exc:
        raise PersistenceError(f"Malformed embeddings artifact {path}: {exc}") from exc
