"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import chromadb

from vector_ingest.config import settings
from vector_ingest.ingestion.models import VectorRecord
from vector_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


def collection_name_for(index_name: str, namespace: str) -> str:
    """Map an ``(index, namespace)`` pair onto a single Chroma collection name."""
    if not index_name:
        raise ValueError("index_name must not be empty")
    return f"{index_name}-{namespace}" if namespace else index_name


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Chroma has no namespaces inside a collection, so each
    ``(index_name, namespace)`` pair maps to its own collection
    (see :func:`collection_name_for`).  Collections are looked up, never
    created.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client; overrides *host* / *port*.
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._collections: dict[str, Any] = {}

    def _collection(self, index_name: str, namespace: str) -> Any:
        name = collection_name_for(index_name, namespace)
        collection = self._collections.get(name)
        if collection is None:
            collection = self._client.get_collection(name)
            self._collections[name] = collection
        return collection

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, index_name: str, namespace: str, records: Sequence[VectorRecord]) -> None:
        if not records:
            return
        collection = self._collection(index_name, namespace)
        collection.upsert(
            ids=[r.id for r in records],
            embeddings=[r.values for r in records],
            metadatas=[dict(r.metadata) for r in records],
            documents=[r.metadata.get("chunk", "") for r in records],
        )
        logger.debug(
            "Upserted %d vectors into collection %r",
            len(records),
            collection_name_for(index_name, namespace),
        )

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
