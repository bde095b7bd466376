"""Progress events, per-run counters, and their wire encoding.

Events travel to the caller as newline-delimited JSON (one object per line)::

    {"filename":"a","totalChunks":3,"chunksUpserted":2,"isComplete":false}

A run that fails ends with a single error record instead of a completion
event::

    {"error":{"type":"EmbeddingError","message":"..."}}
"""

from __future__ import annotations

import enum
import json
import logging

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class RunStatus(str, enum.Enum):
    """Lifecycle of one ingestion run. The last three states are terminal."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED)


class ProgressEvent(BaseModel):
    """Cumulative upload progress for the document currently being processed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: str
    total_chunks: int = Field(alias="totalChunks", ge=0)
    chunks_upserted: int = Field(alias="chunksUpserted", ge=0)
    is_complete: bool = Field(default=False, alias="isComplete")

    def to_json_line(self) -> str:
        return self.model_dump_json(by_alias=True) + "\n"

    def log_line(self) -> str:
        """Compact ``filename-total-upserted-complete`` form used in server logs."""
        complete = "true" if self.is_complete else "false"
        return f"{self.filename}-{self.total_chunks}-{self.chunks_upserted}-{complete}"


class ProgressState:
    """Counters for the document a run is working on.

    Owned by exactly one run. :meth:`start` resets the counters for each new
    document; :meth:`advance` only ever moves ``chunks_upserted`` forward and
    never past ``total_chunks``.
    """

    def __init__(self) -> None:
        self.filename = ""
        self.total_chunks = 0
        self.chunks_upserted = 0

    def start(self, filename: str, total_chunks: int) -> None:
        if total_chunks < 0:
            raise ValueError(f"total_chunks must be >= 0, got {total_chunks}")
        self.filename = filename
        self.total_chunks = total_chunks
        self.chunks_upserted = 0

    def advance(self, count: int) -> ProgressEvent:
        """Record *count* freshly upserted chunks and return the resulting event."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if self.chunks_upserted + count > self.total_chunks:
            raise ValueError(
                f"{self.filename}: {self.chunks_upserted + count} chunks upserted "
                f"exceeds total of {self.total_chunks}"
            )
        self.chunks_upserted += count
        return self.snapshot()

    def snapshot(self, *, is_complete: bool = False) -> ProgressEvent:
        return ProgressEvent(
            filename=self.filename,
            total_chunks=self.total_chunks,
            chunks_upserted=self.chunks_upserted,
            is_complete=is_complete,
        )


def report(event: ProgressEvent) -> ProgressEvent:
    """Log *event* and hand it back, so callers can ``yield report(...)``."""
    logger.info("%s", event.log_line())
    return event


def error_line(exc: BaseException) -> str:
    """Encode the terminal failure record for *exc* as one NDJSON line."""
    payload = {"error": {"type": type(exc).__name__, "message": str(exc)}}
    return json.dumps(payload, ensure_ascii=False) + "\n"
