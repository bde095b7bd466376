"""
Store — vector-store backends the ingestion pipeline writes into.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`InMemoryVectorStore` — in-process backend for local runs and tests.
- :func:`get_vector_store` — build the backend named in the settings.
"""

from vector_ingest.store.base import VectorStoreBase
from vector_ingest.store.memory_store import InMemoryVectorStore

__all__ = [
    "ChromaVectorStore",
    "InMemoryVectorStore",
    "VectorStoreBase",
    "get_vector_store",
]


def get_vector_store(backend: str | None = None) -> VectorStoreBase:
    """Return a store for *backend* (``"chroma"`` or ``"memory"``)."""
    from vector_ingest.config import settings

    backend = (backend or settings.vector_store_backend).lower()
    if backend == "memory":
        return InMemoryVectorStore()
    if backend == "chroma":
        from vector_ingest.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore()
    raise ValueError(f"Unsupported vector_store_backend={backend!r}")


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from vector_ingest.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
