"""FastAPI application exposing batch submission, status, and uploads."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from docembed.config import settings
from docembed.ingestion.models import BatchPhase, BatchStatus, ProcessingRequest, ProcessingResponse
from docembed.processing.orchestrator import BatchOrchestrator, build_orchestrator

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


@lru_cache(maxsize=1)
def get_orchestrator() -> BatchOrchestrator:
    """Process-wide orchestrator, built on first use."""
    return build_orchestrator()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    if get_orchestrator.cache_info().currsize:
        get_orchestrator().shutdown(wait=False)


app = FastAPI(
    title="Document Embedding API",
    version="0.1.0",
    description="Extract text from documents, generate embeddings, and build a vector index.",
    lifespan=lifespan,
)


# ── Health ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


# ── Processing ────────────────────────────────────────────────────────
@app.post(
    "/api/v1/processing/pdf",
    response_model=ProcessingResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def process_documents(
    request: ProcessingRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
) -> ProcessingResponse:
    """Accept a batch of documents; processing continues in the background."""
    batch_id = orchestrator.submit(request.document_paths, request.description, request.metadata)
    return ProcessingResponse(
        batch_id=batch_id,
        total_documents=len(request.document_paths),
        vector_search_index_name=f"{settings.index_name_prefix}-{batch_id}",
    )


@app.get("/api/v1/processing/status/{batch_id}", response_model=BatchStatus)
def processing_status(
    batch_id: str,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
) -> BatchStatus:
    """Current phase and counters of a batch."""
    batch_status = orchestrator.get_status(batch_id)
    if batch_status.phase is BatchPhase.NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"Unknown batch {batch_id}")
    return batch_status


# ── Files ─────────────────────────────────────────────────────────────
@app.post("/api/v1/files/upload")
def upload_files(
    files: list[UploadFile] = File(...),
    description: str | None = Form(None),
) -> JSONResponse:
    """Save uploaded PDFs into a fresh timestamped directory."""
    logger.info("Received %d files to upload (%s)", len(files), description or "no description")
    timestamp = datetime.now(timezone.utc).strftime(_TIMESTAMP_FORMAT)
    upload_dir = Path(settings.upload_dir) / f"document-pdfs-{timestamp}"

    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to create upload directory: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": f"Failed to create upload directory: {exc}", "timestamp": timestamp},
        )

    uploaded: list[str] = []
    failed: list[str] = []
    for upload in files:
        name = upload.filename or "unnamed.pdf"
        content = upload.file.read()
        if not content:
            failed.append(f"{name} (empty file)")
            continue
        if upload.content_type != "application/pdf":
            failed.append(f"{name} (not a PDF)")
            continue
        target = upload_dir / Path(name).name.replace(" ", "_")
        try:
            target.write_bytes(content)
        except OSError as exc:
            logger.error("Failed to upload file %s: %s", name, exc)
            failed.append(f"{name} ({exc})")
            continue
        uploaded.append(str(target))
        logger.info("Uploaded file: %s", target)

    body: dict[str, Any] = {
        "uploadedFiles": uploaded,
        "failedUploads": failed,
        "timestamp": timestamp,
        "totalUploaded": len(uploaded),
        "uploadDirectory": str(upload_dir),
    }
    return JSONResponse(status_code=400 if failed else 200, content=body)


@app.get("/api/v1/files/list")
def list_files() -> dict[str, Any]:
    """All PDFs found under the upload directory."""
    root = Path(settings.upload_dir)
    pdfs = sorted(str(p) for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".pdf")
    return {"files": pdfs, "count": len(pdfs)}
