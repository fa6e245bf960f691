"""Page-text extraction — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader, TextLoader

from docembed.exceptions import ExtractionError

logger = logging.getLogger(__name__)


class TextExtractionSource(ABC):
    """Turns a document on disk into the raw text of each of its pages."""

    @abstractmethod
    def extract_pages(self, document_path: str | Path) -> list[str]:
        """Return one text string per page, in page order.

        Raises
        ------
        ExtractionError
            When the document is missing, unreadable, or corrupt.
        """
        ...


def _require_file(document_path: str | Path) -> Path:
    path = Path(document_path)
    if not path.is_file():
        raise ExtractionError(f"Document not found: {path}")
    return path


class PdfTextExtractor(TextExtractionSource):
    """Extract per-page text from a PDF with ``PyPDFLoader``."""

    def extract_pages(self, document_path: str | Path) -> list[str]:
        path = _require_file(document_path)
        try:
            pages = PyPDFLoader(str(path)).load()
        except Exception as exc:
            raise ExtractionError(f"Failed to extract text from PDF: {path.name}") from exc

        logger.info("Processing PDF: %s with %d pages", path.name, len(pages))
        return [page.page_content for page in pages]


class PlainTextExtractor(TextExtractionSource):
    """Treat a UTF-8 text or Markdown file as a single page."""

    def extract_pages(self, document_path: str | Path) -> list[str]:
        path = _require_file(document_path)
        try:
            docs = TextLoader(str(path), encoding="utf-8").load()
        except Exception as exc:
            raise ExtractionError(f"Failed to read text file: {path.name}") from exc
        return ["\n".join(doc.page_content for doc in docs)]


class FileTextExtractor(TextExtractionSource):
    """Dispatch on file suffix: PDFs page by page, text files as one page."""

    _TEXT_SUFFIXES = (".txt", ".md", ".markdown")

    def __init__(self) -> None:
        self._pdf = PdfTextExtractor()
        self._text = PlainTextExtractor()

    def extract_pages(self, document_path: str | Path) -> list[str]:
        suffix = Path(document_path).suffix.lower()
        if suffix == ".pdf":
            return self._pdf.extract_pages(document_path)
        if suffix in self._TEXT_SUFFIXES:
            return self._text.extract_pages(document_path)
        raise ExtractionError(f"Unsupported document type {suffix!r}: {document_path}")
