"""In-process vector store for local runs and tests."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence

from vector_ingest.ingestion.models import VectorRecord
from vector_ingest.store.base import VectorStoreBase


class InMemoryVectorStore(VectorStoreBase):
    """Dictionary-backed store keyed by ``(index_name, namespace)`` then record id.

    Parameters
    ----------
    indexes:
        When given, only these index names accept writes; anything else
        raises ``KeyError`` the way a remote store rejects an unknown
        index.  When *None*, every index is accepted.
    """

    def __init__(self, indexes: Iterable[str] | None = None) -> None:
        self._indexes = set(indexes) if indexes is not None else None
        self._data: dict[tuple[str, str], dict[str, VectorRecord]] = {}
        self._lock = threading.Lock()
        self.upsert_calls: list[tuple[str, str, list[str]]] = []

    def upsert(self, index_name: str, namespace: str, records: Sequence[VectorRecord]) -> None:
        if self._indexes is not None and index_name not in self._indexes:
            raise KeyError(f"index {index_name!r} does not exist")
        with self._lock:
            bucket = self._data.setdefault((index_name, namespace), {})
            for record in records:
                bucket[record.id] = record
            self.upsert_calls.append((index_name, namespace, [r.id for r in records]))

    def health_check(self) -> bool:
        return True

    def records(self, index_name: str, namespace: str) -> dict[str, VectorRecord]:
        """Return a copy of the records stored under ``(index_name, namespace)``."""
        with self._lock:
            return dict(self._data.get((index_name, namespace), {}))
