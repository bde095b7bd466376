"""Pipeline orchestrator — documents → chunks → batches → vector store.

Usage::

    from vector_ingest.ingestion.pipeline import IngestionPipeline

    pipeline = IngestionPipeline(embedder, store, batch_size=100)
    async for event in pipeline.stream(iter_documents("./documents"), "kb", "default"):
        print(event.to_json_line(), end="")

Each call to :meth:`IngestionPipeline.stream` or :meth:`IngestionPipeline.run`
starts a fresh :class:`IngestionRun`; the embedder and store are the only
objects shared between runs.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from pydantic import BaseModel

from vector_ingest.errors import IngestionCancelled, IngestionError, SourceError
from vector_ingest.ingestion.chunker import Chunker
from vector_ingest.ingestion.models import SourceDocument
from vector_ingest.ingestion.progress import ProgressEvent, ProgressState, RunStatus, report
from vector_ingest.ingestion.upserter import BatchUpserter, ShouldStop

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from vector_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)

OnProgress = Callable[[ProgressEvent], Awaitable[None] | None]


class IngestionResult(BaseModel):
    """Summary of a finished run."""

    status: RunStatus
    documents_processed: int = 0
    chunks_upserted: int = 0
    last_event: ProgressEvent | None = None


def _next_document(iterator: Iterator[SourceDocument]) -> SourceDocument | None:
    """Pull the next document, wrapping loader failures as :class:`SourceError`."""
    try:
        return next(iterator, None)
    except IngestionError:
        raise
    except Exception as exc:
        raise SourceError(f"failed to load next document: {exc}") from exc


class IngestionRun:
    """State of a single ingestion run.

    Holds the progress counters, the run status and the batch upserter for
    exactly one invocation.  ``IDLE → PROCESSING → COMPLETED | FAILED |
    CANCELLED``; nothing is emitted once a terminal status is reached.
    """

    def __init__(
        self,
        embedder: Embeddings,
        store: VectorStoreBase,
        chunker: Chunker,
        batch_size: int,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._chunker = chunker
        self._upserter = BatchUpserter(batch_size)
        self.state = ProgressState()
        self.status = RunStatus.IDLE
        self.document_index = -1
        self.documents_processed = 0
        self.chunks_upserted = 0
        self.last_event: ProgressEvent | None = None
        self.error: BaseException | None = None

    def _emit(self, event: ProgressEvent) -> ProgressEvent:
        self.last_event = event
        return report(event)

    def result(self) -> IngestionResult:
        return IngestionResult(
            status=self.status,
            documents_processed=self.documents_processed,
            chunks_upserted=self.chunks_upserted,
            last_event=self.last_event,
        )

    async def events(
        self,
        documents: Iterable[SourceDocument],
        index_name: str,
        namespace: str,
        should_stop: ShouldStop | None = None,
    ) -> AsyncIterator[ProgressEvent]:
        """Process *documents* in order, yielding progress as batches land.

        The final event has ``is_complete=True`` and carries the last
        document's filename and totals.  On failure the original
        :class:`IngestionError` propagates and no completion event is sent;
        on cancellation the generator simply ends.
        """
        if self.status is not RunStatus.IDLE:
            raise RuntimeError(f"run already {self.status.value}")

        self.status = RunStatus.PROCESSING
        logger.info("Ingestion into %s/%s started", index_name, namespace)
        seen: set[str] = set()
        try:
            if not index_name:
                raise ValueError("index_name must not be empty")
            iterator = iter(documents)
            while True:
                document = await asyncio.to_thread(_next_document, iterator)
                if document is None:
                    break
                self.document_index += 1

                filename = document.filename
                if filename in seen:
                    raise SourceError(
                        f"{document.source_id!r}: another document named {filename!r} "
                        "was already ingested in this run"
                    )
                seen.add(filename)

                chunks = self._chunker.chunk_document(document)
                logger.info("%s: %d chunks", document.source_id, len(chunks))

                if not chunks:
                    self.state.start(filename, 0)
                    yield self._emit(self.state.snapshot())
                else:
                    done = 0
                    async for event in self._upserter.upsert_document(
                        document,
                        chunks,
                        self._embedder,
                        self._store,
                        index_name,
                        namespace,
                        self.state,
                        should_stop,
                    ):
                        self.chunks_upserted += event.chunks_upserted - done
                        done = event.chunks_upserted
                        yield self._emit(event)
                self.documents_processed += 1

            self.status = RunStatus.COMPLETED
            logger.info(
                "Ingestion into %s/%s completed: %d documents, %d chunks",
                index_name,
                namespace,
                self.documents_processed,
                self.chunks_upserted,
            )
            yield self._emit(self.state.snapshot(is_complete=True))
        except IngestionCancelled:
            self.status = RunStatus.CANCELLED
            logger.info("Ingestion into %s/%s cancelled by caller", index_name, namespace)
        except (asyncio.CancelledError, GeneratorExit):
            if not self.status.is_terminal:
                self.status = RunStatus.CANCELLED
                logger.info("Ingestion into %s/%s cancelled", index_name, namespace)
            raise
        except Exception as exc:
            self.status = RunStatus.FAILED
            self.error = exc
            logger.error(
                "Ingestion into %s/%s failed at document %d: %s",
                index_name,
                namespace,
                self.document_index,
                exc,
            )
            raise


class IngestionPipeline:
    """Chunk, embed and upsert a sequence of documents.

    Parameters
    ----------
    embedder:
        LangChain ``Embeddings`` used for every batch.
    store:
        Destination vector store.
    chunk_size / chunk_overlap:
        Chunker configuration.
    batch_size:
        Chunks per embedding + upsert call; fixed for the whole run.
    """

    def __init__(
        self,
        embedder: Embeddings,
        store: VectorStoreBase,
        *,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        batch_size: int = 100,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size ({batch_size}) must be >= 1")
        self.embedder = embedder
        self.store = store
        self.chunker = Chunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        self.batch_size = batch_size

    def new_run(self) -> IngestionRun:
        return IngestionRun(self.embedder, self.store, self.chunker, self.batch_size)

    def stream(
        self,
        documents: Iterable[SourceDocument],
        index_name: str,
        namespace: str,
        should_stop: ShouldStop | None = None,
    ) -> AsyncIterator[ProgressEvent]:
        """Start a new run and return its progress event stream."""
        return self.new_run().events(documents, index_name, namespace, should_stop)

    async def run(
        self,
        documents: Iterable[SourceDocument],
        index_name: str,
        namespace: str,
        on_progress: OnProgress | None = None,
        should_stop: ShouldStop | None = None,
    ) -> IngestionResult:
        """Drive a run to the end, forwarding each event to *on_progress*.

        Raises the run's :class:`IngestionError` on failure.
        """
        run = self.new_run()
        async for event in run.events(documents, index_name, namespace, should_stop):
            if on_progress is not None:
                outcome = on_progress(event)
                if inspect.isawaitable(outcome):
                    await outcome
        return run.result()
