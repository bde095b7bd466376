"""Unit tests for batching, record construction and per-batch progress."""

from __future__ import annotations

import pytest

from vector_ingest.errors import EmbeddingError, IngestionCancelled, StoreError
from vector_ingest.ingestion.models import Chunk, SourceDocument
from vector_ingest.ingestion.progress import ProgressState
from vector_ingest.ingestion.upserter import BatchUpserter, iter_batches
from vector_ingest.store.memory_store import InMemoryVectorStore


def _chunks(n: int, doc_id: str = "docs/report.txt") -> list[Chunk]:
    return [Chunk(document_id=doc_id, sequence_index=i, text=f"chunk {i}") for i in range(n)]


DOC = SourceDocument(source_id="docs/report.txt", text="irrelevant")


class _BrokenStore(InMemoryVectorStore):
    def upsert(self, index_name, namespace, records):  # noqa: ANN001
        raise ConnectionError("connection reset")


# ── iter_batches ───────────────────────────────────────────────────────


class TestIterBatches:
    def test_partitions_in_order(self) -> None:
        batches = list(iter_batches(_chunks(5), 2))
        assert [len(b) for b in batches] == [2, 2, 1]
        flat = [c.sequence_index for b in batches for c in b]
        assert flat == [0, 1, 2, 3, 4]

    def test_empty_input_has_no_batches(self) -> None:
        assert list(iter_batches([], 3)) == []

    def test_exact_multiple(self) -> None:
        assert [len(b) for b in iter_batches(_chunks(4), 2)] == [2, 2]

    def test_invalid_batch_size(self) -> None:
        with pytest.raises(ValueError, match="batch_size"):
            list(iter_batches(_chunks(1), 0))


# ── BatchUpserter ─────────────────────────────────────────────────────


class TestBatchUpserter:
    def test_progress_after_each_batch(self, embedder, memory_store, collect_events) -> None:
        state = ProgressState()
        events = collect_events(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, _chunks(5), embedder, memory_store, "kb", "ns", state
            )
        )
        assert [e.chunks_upserted for e in events] == [2, 4, 5]
        assert all(e.total_chunks == 5 for e in events)
        assert all(e.filename == "report" for e in events)
        assert not any(e.is_complete for e in events)
        assert state.chunks_upserted == 5

    def test_one_embedding_call_and_one_upsert_per_batch(
        self, embedder, memory_store, collect_events
    ) -> None:
        collect_events(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, _chunks(3), embedder, memory_store, "kb", "ns", ProgressState()
            )
        )
        assert [len(c) for c in embedder.calls] == [2, 1]
        assert [ids for _, _, ids in memory_store.upsert_calls] == [
            ["report-0-0", "report-0-1"],
            ["report-1-0"],
        ]

    def test_vectors_follow_input_order(self, embedder, memory_store, collect_events) -> None:
        collect_events(
            BatchUpserter(batch_size=3).upsert_document(
                DOC, _chunks(3), embedder, memory_store, "kb", "ns", ProgressState()
            )
        )
        records = memory_store.records("kb", "ns")
        for i in range(3):
            record = records[f"report-0-{i}"]
            assert record.values == [float(i)]
            assert record.metadata == {"chunk": f"chunk {i}"}

    def test_newlines_normalised_before_embedding_only(
        self, embedder, memory_store, collect_events
    ) -> None:
        chunks = [Chunk(document_id="d", sequence_index=0, text="line one\nline two\n\nend")]
        collect_events(
            BatchUpserter(batch_size=5).upsert_document(
                DOC, chunks, embedder, memory_store, "kb", "", ProgressState()
            )
        )
        assert embedder.calls == [["line one line two end"]]
        stored = memory_store.records("kb", "")["report-0-0"]
        assert stored.metadata["chunk"] == "line one\nline two\n\nend"

    def test_zero_chunks_emits_nothing(self, embedder, memory_store, collect_events) -> None:
        state = ProgressState()
        events = collect_events(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, [], embedder, memory_store, "kb", "ns", state
            )
        )
        assert events == []
        assert embedder.calls == []
        assert (state.filename, state.total_chunks, state.chunks_upserted) == ("report", 0, 0)

    def test_embedding_failure_stops_after_completed_batches(
        self, failing_embedder, memory_store, collect_until_error
    ) -> None:
        events, exc = collect_until_error(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, _chunks(6), failing_embedder(2), memory_store, "kb", "ns", ProgressState()
            )
        )
        assert isinstance(exc, EmbeddingError)
        assert isinstance(exc.__cause__, RuntimeError)
        assert [e.chunks_upserted for e in events] == [2]
        assert sorted(memory_store.records("kb", "ns")) == ["report-0-0", "report-0-1"]

    def test_store_failure_raises_store_error(self, embedder, collect_until_error) -> None:
        events, exc = collect_until_error(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, _chunks(3), embedder, _BrokenStore(), "kb", "ns", ProgressState()
            )
        )
        assert events == []
        assert isinstance(exc, StoreError)
        assert isinstance(exc.__cause__, ConnectionError)

    def test_dimension_change_between_batches_is_rejected(
        self, memory_store, collect_until_error
    ) -> None:
        from langchain_core.embeddings import Embeddings

        class _GrowingEmbeddings(Embeddings):
            def __init__(self) -> None:
                self.dim = 2

            def embed_documents(self, texts):  # noqa: ANN001
                vectors = [[0.5] * self.dim for _ in texts]
                self.dim += 1
                return vectors

            def embed_query(self, text):  # noqa: ANN001
                return [0.0]

        events, exc = collect_until_error(
            BatchUpserter(batch_size=1).upsert_document(
                DOC, _chunks(2), _GrowingEmbeddings(), memory_store, "kb", "ns", ProgressState()
            )
        )
        assert len(events) == 1
        assert isinstance(exc, EmbeddingError)

    def test_should_stop_checked_before_each_batch(
        self, embedder, memory_store, collect_until_error
    ) -> None:
        answers = iter([False, False, True])
        events, exc = collect_until_error(
            BatchUpserter(batch_size=2).upsert_document(
                DOC,
                _chunks(5),
                embedder,
                memory_store,
                "kb",
                "ns",
                ProgressState(),
                should_stop=lambda: next(answers),
            )
        )
        assert isinstance(exc, IngestionCancelled)
        assert len(events) == 1
        assert len(embedder.calls) == 1

    def test_async_should_stop_supported(self, embedder, memory_store, collect_until_error) -> None:
        async def gone() -> bool:
            return True

        events, exc = collect_until_error(
            BatchUpserter(batch_size=2).upsert_document(
                DOC, _chunks(2), embedder, memory_store, "kb", "ns", ProgressState(), gone
            )
        )
        assert events == []
        assert isinstance(exc, IngestionCancelled)
        assert memory_store.upsert_calls == []

    def test_disconnect_during_embedding_skips_the_write(
        self, embedder, memory_store, collect_until_error
    ) -> None:
        """The caller leaves while the first batch is being embedded."""
        events, exc = collect_until_error(
            BatchUpserter(batch_size=2).upsert_document(
                DOC,
                _chunks(3),
                embedder,
                memory_store,
                "kb",
                "ns",
                ProgressState(),
                should_stop=lambda: len(embedder.calls) > 0,
            )
        )
        assert isinstance(exc, IngestionCancelled)
        assert events == []
        assert len(embedder.calls) == 1
        assert memory_store.upsert_calls == []
