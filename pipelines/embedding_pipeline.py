"""KFP v2 pipeline — batch document embedding.

Runs :func:`pipelines.components.process.process_documents` as a single
step: extract → chunk → embed → persist → index.

Compile
-------
    python -m pipelines.embedding_pipeline --compile
"""

from kfp import compiler, dsl

from pipelines.components.process import process_documents


@dsl.pipeline(
    name="document-embedding-pipeline",
    description=(
        "Extract text from documents, chunk it with sentence overlap, "
        "generate embeddings in paced batches, and build a vector index."
    ),
)
def embedding_pipeline(
    document_paths: str = '["/data/documents/policy.pdf"]',
    description: str = "",
    # ── Chunking ───────────────────────────────────────────────────
    chunk_size: int = 300,
    chunk_overlap: int = 50,
    # ── Embedding ──────────────────────────────────────────────────
    embedding_endpoint: str = "http://text-embedding.kubeflow-user.svc.cluster.local/v1/models/text-embedding:predict",
    embedding_model: str = "text-embedding-004",
    embed_batch_size: int = 5,
    embed_batch_delay: float = 0.5,
    # ── Storage / index ────────────────────────────────────────────
    artifact_dir: str = "/data/embeddings",
    chroma_host: str = "chroma.kubeflow.svc.cluster.local",
    chroma_port: int = 8000,
) -> None:
    """One-step pipeline over a JSON list of document paths."""
    process_documents(
        document_paths=document_paths,
        description=description,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        embedding_endpoint=embedding_endpoint,
        embedding_model=embedding_model,
        embed_batch_size=embed_batch_size,
        embed_batch_delay=embed_batch_delay,
        artifact_dir=artifact_dir,
        chroma_host=chroma_host,
        chroma_port=chroma_port,
    )


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Document embedding pipeline")
    parser.add_argument("--compile", action="store_true", help="Compile pipeline to YAML")
    parser.add_argument(
        "--output",
        default="pipelines/compiled/embedding_pipeline.yaml",
        help="Output path for compiled YAML",
    )
    args = parser.parse_args()

    if args.compile:
        compiler.Compiler().compile(embedding_pipeline, args.output)
        print(f"Pipeline compiled → {args.output}")
