"""Embedding generation for chunk batches."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from vector_ingest.config import settings
from vector_ingest.errors import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_huggingface import HuggingFaceEmbeddings

logger = logging.getLogger(__name__)

_NEWLINES = re.compile(r"[\r\n]+")


def get_embedding_function(
    model_name: str | None = None,
    *,
    normalize_embeddings: bool | None = None,
) -> HuggingFaceEmbeddings:
    """Return the configured sentence-transformer embedding function."""
    from langchain_huggingface import HuggingFaceEmbeddings

    if normalize_embeddings is None:
        normalize_embeddings = settings.normalize_embeddings
    return HuggingFaceEmbeddings(
        model_name=model_name or settings.embedding_model,
        encode_kwargs={"normalize_embeddings": normalize_embeddings},
    )


def normalize_text(text: str) -> str:
    """Replace each run of newline characters with a single space."""
    return _NEWLINES.sub(" ", text)


def embed_batch(
    embedder: Embeddings,
    texts: list[str],
    *,
    expected_dim: int | None = None,
) -> list[list[float]]:
    """Embed one batch of chunk texts with a single model call.

    Parameters
    ----------
    embedder:
        Any LangChain ``Embeddings`` implementation.
    texts:
        Raw chunk texts; newlines are normalised before embedding.
    expected_dim:
        Vector length every result must have. When *None*, all vectors
        must match the length of the first one.

    Returns
    -------
    list[list[float]]
        One vector per input text, in input order.

    Raises
    ------
    EmbeddingError
        If the model call fails or returns the wrong number or shape of
        vectors.
    """
    normalized = [normalize_text(t) for t in texts]
    try:
        vectors = embedder.embed_documents(normalized)
    except Exception as exc:
        raise EmbeddingError(f"embedding call failed for batch of {len(texts)}: {exc}") from exc

    if len(vectors) != len(texts):
        raise EmbeddingError(
            f"embedding model returned {len(vectors)} vectors for {len(texts)} texts"
        )

    dim = expected_dim
    result: list[list[float]] = []
    for i, vector in enumerate(vectors):
        values = [float(v) for v in vector]
        if dim is None:
            dim = len(values)
        if len(values) != dim:
            raise EmbeddingError(f"vector {i} has dimension {len(values)}, expected {dim}")
        result.append(values)
    logger.debug("Embedded %d texts (dim=%s)", len(result), dim)
    return result
