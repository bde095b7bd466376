"""Abstract base class for vector-store backends.

Adding a new backend (Pinecone, Weaviate, Qdrant …) only requires
subclassing :class:`VectorStoreBase` and implementing the two abstract
methods.  The ingestion pipeline is backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from vector_ingest.ingestion.models import VectorRecord


class VectorStoreBase(ABC):
    """Backend-agnostic write interface used by the batch upserter.

    Indexes and namespaces are expected to exist already; backends look
    them up but never create or delete them.
    """

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert(self, index_name: str, namespace: str, records: Sequence[VectorRecord]) -> None:
        """Insert or overwrite *records* in ``(index_name, namespace)``.

        The whole sequence is written in one call.  Records whose ``id``
        already exists are replaced.  Any failure must raise; a return
        means every record was accepted.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
