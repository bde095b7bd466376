"""Text chunking strategies."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

from vector_ingest.ingestion.models import Chunk, SourceDocument

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class Chunker:
    """Split document text into bounded, possibly overlapping chunks.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.
    separators:
        Split boundaries, in priority order.

    Separators are kept and whitespace is not stripped, so with
    ``chunk_overlap=0`` the chunks concatenate back to the original text.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: list[str] | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size ({chunk_size}) must be > 0")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be >= 0 and < chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=separators or DEFAULT_SEPARATORS,
            keep_separator=True,
            strip_whitespace=False,
        )

    def split(self, text: str) -> list[str]:
        """Return the chunks of *text*; empty text yields an empty list."""
        if not text:
            return []
        return self._splitter.split_text(text)

    def chunk_document(self, document: SourceDocument) -> list[Chunk]:
        """Split *document* into densely numbered :class:`Chunk` objects."""
        return [
            Chunk(document_id=document.source_id, sequence_index=idx, text=piece)
            for idx, piece in enumerate(self.split(document.text))
        ]
