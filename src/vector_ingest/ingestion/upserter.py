"""Batch upserter: embeds chunks window by window and writes them to the store."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator, Sequence
from typing import TYPE_CHECKING

from vector_ingest.errors import IngestionCancelled, StoreError
from vector_ingest.ingestion.embedder import embed_batch
from vector_ingest.ingestion.models import Chunk, SourceDocument, VectorRecord
from vector_ingest.ingestion.progress import ProgressEvent, ProgressState

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from vector_ingest.store.base import VectorStoreBase

logger = logging.getLogger(__name__)

# Returns True once the caller is gone; may be sync or async.
ShouldStop = Callable[[], bool | Awaitable[bool]]


def iter_batches(chunks: Sequence[Chunk], batch_size: int) -> Iterator[list[Chunk]]:
    """Yield consecutive, non-overlapping windows of at most *batch_size* chunks."""
    if batch_size < 1:
        raise ValueError(f"batch_size ({batch_size}) must be >= 1")
    for start in range(0, len(chunks), batch_size):
        yield list(chunks[start : start + batch_size])


async def check_should_stop(should_stop: ShouldStop | None) -> None:
    """Raise :class:`IngestionCancelled` if *should_stop* reports the caller is gone."""
    if should_stop is None:
        return
    result = should_stop()
    if inspect.isawaitable(result):
        result = await result
    if result:
        raise IngestionCancelled("caller disconnected")


class BatchUpserter:
    """Embed and upsert one document's chunks in fixed-size batches.

    An instance belongs to a single ingestion run: it remembers the
    embedding dimension seen on the run's first batch and rejects vectors
    of any other length afterwards.

    Parameters
    ----------
    batch_size:
        Maximum number of chunks per embedding call and per upsert call.
    """

    def __init__(self, batch_size: int = 100) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size ({batch_size}) must be >= 1")
        self.batch_size = batch_size
        self.embedding_dim: int | None = None

    async def upsert_document(
        self,
        document: SourceDocument,
        chunks: Sequence[Chunk],
        embedder: Embeddings,
        store: VectorStoreBase,
        index_name: str,
        namespace: str,
        state: ProgressState,
        should_stop: ShouldStop | None = None,
    ) -> AsyncIterator[ProgressEvent]:
        """Write every chunk of *document*, yielding a progress event per batch.

        Batches run strictly in order.  The first failing embedding or store
        call ends the generator with :class:`EmbeddingError` /
        :class:`StoreError`; earlier batches stay written.
        """
        filename = document.filename
        state.start(filename, len(chunks))

        for batch_index, batch in enumerate(iter_batches(chunks, self.batch_size)):
            await check_should_stop(should_stop)

            vectors = await asyncio.to_thread(
                embed_batch,
                embedder,
                [c.text for c in batch],
                expected_dim=self.embedding_dim,
            )
            if self.embedding_dim is None and vectors:
                self.embedding_dim = len(vectors[0])

            records = [
                VectorRecord.from_chunk(
                    chunk,
                    values,
                    filename=filename,
                    batch_index=batch_index,
                    index_within_batch=i,
                )
                for i, (chunk, values) in enumerate(zip(batch, vectors))
            ]

            await check_should_stop(should_stop)

            try:
                await asyncio.to_thread(store.upsert, index_name, namespace, records)
            except Exception as exc:
                raise StoreError(
                    f"upsert of batch {batch_index} for {filename!r} into "
                    f"{index_name}/{namespace} failed: {exc}"
                ) from exc

            yield state.advance(len(batch))

        logger.debug("Finished %s: %d/%d chunks", filename, state.chunks_upserted, state.total_chunks)
