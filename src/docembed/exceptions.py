"""Exceptions raised by the document-to-embedding pipeline.

Every collaborator wraps its library / IO failures in one of these so the
batch orchestrator can turn them into a terminal ``FAILED`` status with a
readable reason.
"""


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str, stage: str) -> None:
        self.message = message
        self.stage = stage
        super().__init__(message)


class ExtractionError(PipelineError):
    """A document could not be read or is corrupt."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "extraction")


class EmbeddingProviderError(PipelineError):
    """The embedding request failed or its response could not be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "embedding")


class PersistenceError(PipelineError):
    """The embedding collection could not be written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "persistence")


class IndexBuildError(PipelineError):
    """The vector index could not be created."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "indexing")
