"""docembed — batch document-to-embedding pipeline."""

__version__ = "0.1.0"
