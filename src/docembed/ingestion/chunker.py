"""Sentence-aware text chunking with word overlap."""

from __future__ import annotations

import logging
import re

from docembed.config import settings
from docembed.ingestion.models import TextChunk

logger = logging.getLogger(__name__)

# Sentence boundary: terminal punctuation followed by whitespace.  The
# punctuation stays attached to the preceding sentence.
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    """Split *text* into trimmed sentences, dropping empty fragments."""
    return [part.strip() for part in _SENTENCE_BOUNDARY.split(text) if part.strip()]


class SentenceChunker:
    """Pack whole sentences into chunks of at most ``chunk_size`` characters.

    When a chunk is flushed, its trailing ``chunk_overlap`` words seed the
    next chunk so that context carries across the boundary.  A sentence
    longer than ``chunk_size`` is never split; it ends up as one chunk
    (plus any carried-over words).

    Parameters
    ----------
    chunk_size:
        Maximum buffer length in characters before a flush is forced.
    chunk_overlap:
        Number of trailing words copied from a flushed chunk into the next.
    """

    def __init__(
        self,
        chunk_size: int = settings.chunk_size,
        chunk_overlap: int = settings.chunk_overlap,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def extract(self, page_texts: list[str], source_name: str) -> list[TextChunk]:
        """Chunk every page of one document.

        Parameters
        ----------
        page_texts:
            Raw text of each page, in page order.
        source_name:
            Document name recorded on every chunk.

        Returns
        -------
        list[TextChunk]
            Chunks in page order; ``position`` restarts at 0 on each page.
        """
        chunks: list[TextChunk] = []
        for page_number, page_text in enumerate(page_texts, start=1):
            pieces = self.chunk_sentences(split_sentences(page_text))
            for position, content in enumerate(pieces):
                chunks.append(
                    TextChunk(
                        content=content,
                        source_document=source_name,
                        page_number=page_number,
                        position=position,
                    )
                )

        logger.info(
            "Extracted %d chunks from %s (%d pages)", len(chunks), source_name, len(page_texts)
        )
        return chunks

    def chunk_sentences(self, sentences: list[str]) -> list[str]:
        """Pack *sentences* into trimmed chunk strings."""
        pieces: list[str] = []
        buffer = ""
        for sentence in sentences:
            if buffer and len(buffer) + len(sentence) > self.chunk_size:
                pieces.append(buffer.strip())
                buffer = self._overlap_seed(buffer)
            buffer += sentence + " "

        if buffer.strip():
            pieces.append(buffer.strip())
        return pieces

    def _overlap_seed(self, flushed: str) -> str:
        words = flushed.split()
        keep = min(self.chunk_overlap, len(words))
        if keep == 0:
            return ""
        return " ".join(words[-keep:]) + " "


def extract_chunks(
    page_texts: list[str],
    source_name: str,
    *,
    chunk_size: int = settings.chunk_size,
    chunk_overlap: int = settings.chunk_overlap,
) -> list[TextChunk]:
    """Functional shortcut for ``SentenceChunker(...).extract(...)``."""
    return SentenceChunker(chunk_size, chunk_overlap).extract(page_texts, source_name)
