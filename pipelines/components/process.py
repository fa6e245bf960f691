"""KFP v2 component — Run one document batch end-to-end.

Extracts page text from every document, chunks it, embeds the chunks
through the KServe embedding endpoint, writes the embedding collection to
the artifact directory, and builds a Chroma index for the batch.  Unlike
the HTTP service, the batch runs synchronously so the step fails when the
batch fails.

Local testing
-------------
    from pipelines.components.process import process_documents
    process_documents.python_func(
        document_paths='["/data/policy.pdf"]',
        metrics=_FakeArtifact("/tmp/metrics"),
    )
"""

from kfp import dsl


@dsl.component(base_image="docembed:0.1.0")
def process_documents(
    document_paths: str,
    metrics: dsl.Output[dsl.Metrics],
    description: str = "",
    chunk_size: int = 300,
    chunk_overlap: int = 50,
    embedding_endpoint: str = "http://text-embedding.kubeflow-user.svc.cluster.local/v1/models/text-embedding:predict",
    embedding_model: str = "text-embedding-004",
    embed_batch_size: int = 5,
    embed_batch_delay: float = 0.5,
    artifact_dir: str = "/data/embeddings",
    chroma_host: str = "chroma.kubeflow.svc.cluster.local",
    chroma_port: int = 8000,
) -> str:
    """Process a batch of documents into a vector index.

    Parameters
    ----------
    document_paths:
        JSON-encoded **list** of document paths (PDF, text, or Markdown).
    metrics:
        Output Metrics artifact with batch statistics.
    description:
        Free-text description stored on the embedding collection.
    chunk_size / chunk_overlap:
        Chunking parameters (characters / words).
    embedding_endpoint / embedding_model:
        KServe predict URL and the model identifier it serves.
    embed_batch_size / embed_batch_delay:
        Chunks per request and the pause between requests in seconds.
    artifact_dir:
        Directory the embedding collection JSON is written to.
    chroma_host / chroma_port:
        Chroma connection details.

    Returns
    -------
    str
        Summary, e.g. ``"Batch <id>: 256 chunks from 3 documents → index <name>"``.
    """
    import json
    import logging
    import uuid

    from docembed.ingestion.chunker import SentenceChunker
    from docembed.ingestion.embedder import EmbeddingBatcher, KServeEmbeddingProvider
    from docembed.ingestion.loader import FileTextExtractor
    from docembed.ingestion.models import BatchPhase
    from docembed.processing.orchestrator import BatchOrchestrator
    from docembed.storage.artifact_store import LocalArtifactStore
    from docembed.storage.chroma_store import ChromaIndexBuilder

    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("process_documents")

    paths = json.loads(document_paths) if isinstance(document_paths, str) else document_paths
    if not isinstance(paths, list) or not paths:
        raise ValueError(f"'document_paths' must be a non-empty JSON list, got: {document_paths!r}")

    provider = KServeEmbeddingProvider(embedding_endpoint, model_name=embedding_model)
    orchestrator = BatchOrchestrator(
        extractor=FileTextExtractor(),
        batcher=EmbeddingBatcher(
            provider, batch_size=embed_batch_size, delay_seconds=embed_batch_delay
        ),
        artifact_store=LocalArtifactStore(artifact_dir),
        index_builder=ChromaIndexBuilder(host=chroma_host, port=chroma_port),
        chunker=SentenceChunker(chunk_size, chunk_overlap),
        max_workers=1,
    )

    batch_id = str(uuid.uuid4())
    try:
        descriptor = orchestrator.run_batch(batch_id, paths, description)
    finally:
        orchestrator.shutdown()
    status = orchestrator.get_status(batch_id)

    metrics.log_metric("documents_processed", status.processed_documents)
    metrics.log_metric("chunks_embedded", status.processed_chunks)

    if status.phase is not BatchPhase.COMPLETED or descriptor is None:
        raise RuntimeError(f"Batch {batch_id} failed: {status.error}")

    msg = (f"Batch {batch_id}: {status.processed_chunks} chunks from "
           f"{status.processed_documents} documents → index {descriptor.index_id}")
    log.info(msg)
    return msg
