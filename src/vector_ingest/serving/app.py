"""FastAPI application exposing document ingestion over HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from langchain_core.embeddings import Embeddings
from pydantic import BaseModel, ConfigDict, Field

from vector_ingest.config import Settings, settings
from vector_ingest.errors import SourceError
from vector_ingest.ingestion.embedder import get_embedding_function
from vector_ingest.ingestion.loader import iter_documents, list_files
from vector_ingest.ingestion.models import SourceDocument
from vector_ingest.ingestion.pipeline import IngestionPipeline
from vector_ingest.ingestion.progress import error_line
from vector_ingest.store import VectorStoreBase, get_vector_store

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Vector Ingest API",
    version="0.1.0",
    description="Chunk, embed and upsert documents into a vector index with streamed progress.",
)


# ── Request schemas ───────────────────────────────────────────────────
class IngestRequest(BaseModel):
    """Target index and namespace for one ingestion run."""

    model_config = ConfigDict(populate_by_name=True)

    index_name: str = Field(alias="indexName", min_length=1)
    namespace: str = ""


# ── Dependencies ──────────────────────────────────────────────────────
def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_embedder() -> Embeddings:
    """Embedding model, loaded once and shared by every run."""
    return get_embedding_function()


@lru_cache(maxsize=1)
def get_store() -> VectorStoreBase:
    return get_vector_store()


def get_pipeline(
    cfg: Settings = Depends(get_settings),
    embedder: Embeddings = Depends(get_embedder),
    store: VectorStoreBase = Depends(get_store),
) -> IngestionPipeline:
    return IngestionPipeline(
        embedder,
        store,
        chunk_size=cfg.chunk_size,
        chunk_overlap=cfg.chunk_overlap,
        batch_size=cfg.batch_size,
    )


def get_documents(cfg: Settings = Depends(get_settings)) -> Iterable[SourceDocument]:
    """Lazy document source; files are read as the pipeline reaches them."""
    return iter_documents(cfg.documents_dir)


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/files")
async def files(cfg: Settings = Depends(get_settings)) -> list[str]:
    """List the files waiting in the documents directory."""
    try:
        return list_files(cfg.documents_dir)
    except SourceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/ingest")
async def ingest(
    payload: IngestRequest,
    request: Request,
    pipeline: IngestionPipeline = Depends(get_pipeline),
    documents: Iterable[SourceDocument] = Depends(get_documents),
) -> StreamingResponse:
    """Ingest the configured documents, streaming one JSON line per event.

    A normal run ends with an ``"isComplete": true`` line.  A failed run
    ends with a single ``{"error": {...}}`` line instead.
    """

    async def ndjson() -> AsyncIterator[str]:
        try:
            async for event in pipeline.stream(
                documents,
                payload.index_name,
                payload.namespace,
                should_stop=request.is_disconnected,
            ):
                yield event.to_json_line()
        except Exception as exc:
            logger.exception("Ingestion into %s/%s failed", payload.index_name, payload.namespace)
            yield error_line(exc)

    return StreamingResponse(
        ndjson(),
        media_type="application/x-ndjson",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
