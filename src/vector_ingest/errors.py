"""Exception hierarchy for the ingestion pipeline.

Every fatal error aborts the remaining run. Nothing here is retried: writes
that completed before the failure stay in the vector store.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for errors that terminate an ingestion run."""


class SourceError(IngestionError):
    """A document could not be listed, read or parsed."""


class EmbeddingError(IngestionError):
    """The embedding call for a batch failed or returned malformed vectors."""


class StoreError(IngestionError):
    """The vector store rejected or failed an upsert."""


class IngestionCancelled(Exception):
    """The caller went away; the run stops before the next batch.

    Not an :class:`IngestionError`: cancellation is a normal way for a run
    to end and produces no error record.
    """
