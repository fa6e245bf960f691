"""Unit tests for the KFP processing component.

The tests call the *Python function* behind the ``@dsl.component``
decorator (``component.python_func``), so no Kubeflow cluster is needed.
The embedding endpoint is replaced with an in-memory provider and
``chromadb`` with a mock module; extraction, chunking, and persistence
run for real against ``tmp_path``.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeProvider

from docembed.storage.artifact_store import load_collection


class _FakeArtifact:
    """Minimal stand-in for ``dsl.Metrics``."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.metadata: dict = {}
        self._metrics: dict = {}

    def log_metric(self, name: str, value) -> None:
        self._metrics[name] = value


@pytest.fixture()
def mock_chromadb():
    mock_collection = MagicMock()
    mock_client = MagicMock()
    mock_client.get_or_create_collection.return_value = mock_collection
    module = MagicMock()
    module.HttpClient.return_value = mock_client
    with patch.dict("sys.modules", {"chromadb": module}):
        yield module


class TestProcessDocuments:
    """Tests for ``pipelines.components.process.process_documents``."""

    def test_processes_text_documents(self, tmp_path: Path, mock_chromadb: MagicMock) -> None:
        (tmp_path / "a.txt").write_text("Kubeflow runs pipelines. Each step is a container.")
        (tmp_path / "b.md").write_text("Embeddings are stored as JSON. The index lives in Chroma.")
        out_dir = tmp_path / "embeddings"
        metrics = _FakeArtifact(str(tmp_path / "metrics"))

        from pipelines.components.process import process_documents

        with patch("docembed.ingestion.embedder.KServeEmbeddingProvider", return_value=FakeProvider()):
            result = process_documents.python_func(
                document_paths=json.dumps([str(tmp_path / "a.txt"), str(tmp_path / "b.md")]),
                metrics=metrics,
                description="kfp run",
                chunk_size=30,
                chunk_overlap=2,
                embed_batch_delay=0.0,
                artifact_dir=str(out_dir),
                chroma_host="localhost",
            )

        assert "from 2 documents" in result
        assert "→ index document-index-" in result
        assert metrics._metrics["documents_processed"] == 2
        assert metrics._metrics["chunks_embedded"] == 4

        mock_chromadb.HttpClient.assert_called_once_with(host="localhost", port=8000)
        upsert = mock_chromadb.HttpClient.return_value.get_or_create_collection.return_value.upsert
        assert len(upsert.call_args.kwargs["ids"]) == 4

        artifacts = list(out_dir.glob("*.json"))
        assert len(artifacts) == 1
        collection = load_collection(str(artifacts[0]))
        assert collection.description == "kfp run"
        assert collection.embedding_model == "fake-embedding-model"
        assert {v.source_document for v in collection.embeddings} == {"a.txt", "b.md"}

    def test_failed_batch_fails_the_step(self, tmp_path: Path, mock_chromadb: MagicMock) -> None:
        metrics = _FakeArtifact(str(tmp_path / "metrics"))

        from pipelines.components.process import process_documents

        with patch("docembed.ingestion.embedder.KServeEmbeddingProvider", return_value=FakeProvider()):
            with pytest.raises(RuntimeError, match="Document not found"):
                process_documents.python_func(
                    document_paths=json.dumps([str(tmp_path / "missing.pdf")]),
                    metrics=metrics,
                    artifact_dir=str(tmp_path),
                )
        assert metrics._metrics["documents_processed"] == 0

    @pytest.mark.parametrize("paths", ['"/data/a.pdf"', "[]", '{"path": "/data/a.pdf"}'])
    def test_invalid_document_paths_param(self, tmp_path: Path, paths: str) -> None:
        from pipelines.components.process import process_documents

        with pytest.raises(ValueError, match="non-empty JSON list"):
            process_documents.python_func(
                document_paths=paths,
                metrics=_FakeArtifact(str(tmp_path / "metrics")),
            )


def test_pipeline_compiles(tmp_path: Path) -> None:
    from kfp import compiler

    from pipelines.embedding_pipeline import embedding_pipeline

    out = tmp_path / "pipeline.yaml"
    compiler.Compiler().compile(embedding_pipeline, str(out))
    assert "process-documents" in out.read_text()
