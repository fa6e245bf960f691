"""KFP v2 components — each file exports one @dsl.component."""

from pipelines.components.process import process_documents

__all__ = [
    "process_documents",
]
