"""KServe custom model runtime serving text embeddings.

Deployed as an ``InferenceService`` this is the embedding provider that
:class:`~docembed.ingestion.embedder.KServeEmbeddingProvider` talks to.
It answers in the schema the batcher decodes strictly::

    {"predictions": [{"embeddings": {"values": [0.01, -0.2, ...]}}, ...]}
"""

from __future__ import annotations

import logging
from typing import Any

import kserve

from docembed.config import settings

logger = logging.getLogger(__name__)


class EmbeddingModel(kserve.Model):
    """KServe-compatible model wrapping a sentence-transformer.

    Parameters
    ----------
    name:
        Model name used in the ``/v1/models/<name>:predict`` route.
    model_name:
        HuggingFace model identifier to load.
    """

    def __init__(self, name: str = "text-embedding", model_name: str = settings.huggingface_model) -> None:
        super().__init__(name)
        self.model_name = model_name
        self.embedder = None
        self.ready = False

    def load(self) -> None:
        """Load the sentence-transformer (called once at startup)."""
        from langchain_huggingface import HuggingFaceEmbeddings

        self.embedder = HuggingFaceEmbeddings(model_name=self.model_name)
        self.ready = True
        logger.info("Loaded embedding model %s", self.model_name)

    def predict(self, payload: dict[str, Any], headers: dict[str, str] | None = None) -> dict:
        """Embed every instance.

        Parameters
        ----------
        payload:
            ``{"instances": [{"content": "..."}, ...]}``
        headers:
            Optional HTTP headers.

        Returns
        -------
        dict
            ``{"predictions": [{"embeddings": {"values": [...]}}, ...]}``
        """
        instances = payload.get("instances", [])
        texts = [instance.get("content", "") for instance in instances]
        vectors = self.embedder.embed_documents(texts) if texts else []
        return {"predictions": [{"embeddings": {"values": list(v)}} for v in vectors]}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    model = EmbeddingModel()
    model.load()
    kserve.ModelServer().start([model])
