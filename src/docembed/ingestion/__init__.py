"""
Ingestion — page extraction, sentence chunking, and embedding generation.

This module turns documents on disk into ordered embedding vectors.  It
has no knowledge of batches or status tracking; see
:mod:`docembed.processing` for the orchestration layer.
"""
