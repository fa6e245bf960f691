"""Batched embedding generation against an external prediction endpoint.

Chunks are sent to the provider in small fixed-size batches, one request
at a time, with a fixed pause between requests.  Each request carries one
instance per chunk (``{"content": <text>}``) and the provider answers with
one prediction per instance, in order.

Predictions are decoded in two tiers:

1. **strict** — ``prediction["embeddings"]["values"]``, the schema served
   by :mod:`docembed.serving.kserve_runtime` and by Vertex-style text
   embedding models;
2. **fallback** — the first top-level field holding a list of numbers.
   This is a best-effort heuristic; for an unfamiliar response schema it
   may pick the wrong field.

Every vector of one call must have the dimension of the first.  Any
failure aborts the whole call and discards vectors produced so far.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple

import requests

from docembed.config import settings
from docembed.exceptions import EmbeddingProviderError
from docembed.ingestion.models import EmbeddingVector, TextChunk

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class EmbeddingProvider(ABC):
    """Backend-agnostic embedding prediction interface.

    Parameters
    ----------
    model_name:
        Identifier of the model that produces the vectors; recorded on the
        resulting embedding collection.
    """

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name

    @abstractmethod
    def predict(self, instances: list[dict[str, Any]]) -> list[Any]:
        """Return one prediction per instance, in the same order.

        Raises
        ------
        EmbeddingProviderError
            On request or transport failure.
        """
        ...


class KServeEmbeddingProvider(EmbeddingProvider):
    """Calls a KServe v1 ``:predict`` endpoint over HTTP.

    Parameters
    ----------
    endpoint:
        Full predict URL, e.g. ``http://host/v1/models/text-embedding:predict``.
    model_name:
        Model identifier reported on the embedding collection.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        endpoint: str = settings.embedding_endpoint,
        *,
        model_name: str = settings.embedding_model,
        timeout: int = settings.embedding_request_timeout,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(model_name)
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    def predict(self, instances: list[dict[str, Any]]) -> list[Any]:
        payload = {"instances": instances, "parameters": {}}
        try:
            resp = self._session.post(self.endpoint, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise EmbeddingProviderError(f"Embedding request to {self.endpoint} failed: {exc}") from exc
        except ValueError as exc:
            raise EmbeddingProviderError(f"Embedding endpoint returned invalid JSON: {exc}") from exc

        predictions = body.get("predictions") if isinstance(body, Mapping) else None
        if not isinstance(predictions, list):
            raise EmbeddingProviderError("Embedding response has no 'predictions' list")
        return predictions


class HuggingFaceEmbeddingProvider(EmbeddingProvider):
    """Runs a sentence-transformer in-process (no network hop).

    Predictions use the strict ``{"embeddings": {"values": [...]}}`` shape.
    """

    def __init__(self, model_name: str = settings.huggingface_model) -> None:
        super().__init__(model_name)
        from langchain_huggingface import HuggingFaceEmbeddings

        self._embedder = HuggingFaceEmbeddings(model_name=model_name)

    def predict(self, instances: list[dict[str, Any]]) -> list[Any]:
        texts = [instance["content"] for instance in instances]
        try:
            vectors = self._embedder.embed_documents(texts)
        except Exception as exc:
            raise EmbeddingProviderError(f"Local embedding model failed: {exc}") from exc
        return [{"embeddings": {"values": vector}} for vector in vectors]


def get_embedding_provider() -> EmbeddingProvider:
    """Return the provider selected by ``settings.embedding_backend``."""
    backend = settings.embedding_backend
    if backend == "kserve":
        return KServeEmbeddingProvider()
    if backend == "huggingface":
        return HuggingFaceEmbeddingProvider()
    raise ValueError(f"Unsupported embedding_backend={backend!r}. Choose from: kserve, huggingface.")


# ---------------------------------------------------------------------------
# Response decoding
# ---------------------------------------------------------------------------


class DecodeResult(NamedTuple):
    """A decoded vector tagged with the strategy that produced it."""

    vector: list[float]
    strategy: str  # "strict" | "fallback"


def _as_vector(value: Any) -> list[float] | None:
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value):
        return None
    return [float(v) for v in value]


def decode_prediction(prediction: Any) -> DecodeResult:
    """Extract the embedding vector from one provider prediction.

    Raises
    ------
    EmbeddingProviderError
        When neither the strict path nor the fallback scan yields a vector.
    """
    if not isinstance(prediction, Mapping):
        raise EmbeddingProviderError(
            f"Prediction is not an object: {type(prediction).__name__}"
        )

    embeddings = prediction.get("embeddings")
    if isinstance(embeddings, Mapping):
        vector = _as_vector(embeddings.get("values"))
        if vector is not None:
            return DecodeResult(vector, "strict")

    for key, value in prediction.items():
        vector = _as_vector(value)
        if vector is not None:
            logger.warning("Using fallback field %r to extract embedding values", key)
            return DecodeResult(vector, "fallback")

    logger.error("Could not find embedding values in prediction with keys %s", list(prediction))
    raise EmbeddingProviderError("Failed to extract embedding values from response")


# ---------------------------------------------------------------------------
# Batcher
# ---------------------------------------------------------------------------


class EmbeddingBatcher:
    """Turn chunks into embedding vectors with paced, sequential batches.

    Parameters
    ----------
    provider:
        The prediction backend.
    batch_size:
        Chunks per provider request.
    delay_seconds:
        Fixed pause between consecutive requests.
    sleep:
        Pause function, injectable for tests.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        batch_size: int = settings.embedding_batch_size,
        delay_seconds: float = settings.embedding_batch_delay_seconds,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self.provider = provider
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    @property
    def model_name(self) -> str:
        return self.provider.model_name

    def embed(self, chunks: list[TextChunk]) -> list[EmbeddingVector]:
        """Embed *chunks*, preserving order and length.

        Raises
        ------
        EmbeddingProviderError
            If any batch request or decode fails; nothing is returned for
            batches that did succeed.
        """
        if not chunks:
            return []

        batches = [chunks[i : i + self.batch_size] for i in range(0, len(chunks), self.batch_size)]
        logger.info(
            "Embedding %d chunks in %d batches (model=%s, batch_size=%d)",
            len(chunks), len(batches), self.model_name, self.batch_size,
        )

        vectors: list[EmbeddingVector] = []
        for batch_idx, batch in enumerate(batches):
            if batch_idx > 0 and self.delay_seconds > 0:
                self._sleep(self.delay_seconds)
            batch_vectors = self._embed_batch(batch, batch_idx)
            dimension = len((vectors or batch_vectors)[0].embedding)
            self._check_dimension(batch_vectors, dimension, batch_idx)
            vectors.extend(batch_vectors)
            logger.debug("  embedded %d / %d", len(vectors), len(chunks))

        logger.info("Generated %d embeddings successfully", len(vectors))
        return vectors

    def _embed_batch(self, batch: list[TextChunk], batch_idx: int) -> list[EmbeddingVector]:
        instances = [{"content": chunk.content} for chunk in batch]
        try:
            predictions = self.provider.predict(instances)
        except EmbeddingProviderError:
            raise
        except Exception as exc:
            raise EmbeddingProviderError(f"Embedding batch {batch_idx} failed: {exc}") from exc

        if len(predictions) != len(batch):
            raise EmbeddingProviderError(
                f"Embedding batch {batch_idx}: expected {len(batch)} predictions, "
                f"got {len(predictions)}"
            )

        return [
            EmbeddingVector.from_chunk(chunk, decode_prediction(prediction).vector)
            for chunk, prediction in zip(batch, predictions)
        ]

    @staticmethod
    def _check_dimension(vectors: list[EmbeddingVector], dimension: int, batch_idx: int) -> None:
        # All vectors of one call share the dimension of the first.
        for vector in vectors:
            if len(vector.embedding) != dimension:
                raise EmbeddingProviderError(
                    f"Embedding batch {batch_idx}: vector for chunk {vector.id} has "
                    f"dimension {len(vector.embedding)}, expected {dimension}"
                )
