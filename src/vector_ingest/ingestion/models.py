"""Domain models flowing through the ingestion pipeline."""

from __future__ import annotations

from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field


class SourceDocument(BaseModel):
    """One loaded source file.

    Attributes
    ----------
    source_id:
        Locator of the file the text came from, usually its path.
    text:
        Full extracted text of the file.
    """

    model_config = ConfigDict(frozen=True)

    source_id: str
    text: str

    @property
    def filename(self) -> str:
        """Base name of :attr:`source_id` without its final extension.

        ``"documents/a.txt"`` → ``"a"``; names without an extension (or
        dotfiles such as ``".env"``) are returned unchanged.
        """
        return PurePath(self.source_id).stem


class Chunk(BaseModel):
    """A bounded slice of a document's text, the unit that gets embedded."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    sequence_index: int = Field(ge=0)
    text: str


class VectorRecord(BaseModel):
    """A single vector written to the store.

    The ``id`` is ``{filename}-{batch_index}-{index_within_batch}``, so
    re-ingesting the same document with the same batch size addresses the
    same records.
    """

    id: str
    values: list[float]
    metadata: dict[str, str] = Field(default_factory=dict)

    @staticmethod
    def make_id(filename: str, batch_index: int, index_within_batch: int) -> str:
        return f"{filename}-{batch_index}-{index_within_batch}"

    @classmethod
    def from_chunk(
        cls,
        chunk: Chunk,
        values: list[float],
        *,
        filename: str,
        batch_index: int,
        index_within_batch: int,
    ) -> VectorRecord:
        return cls(
            id=cls.make_id(filename, batch_index, index_within_batch),
            values=values,
            metadata={"chunk": chunk.text},
        )
