"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Document source
    documents_dir: str = Field(default="./documents", description="Directory scanned for source documents")

    # Chunking
    chunk_size: int = Field(default=1000, gt=0, description="Maximum number of characters per chunk")
    chunk_overlap: int = Field(default=200, ge=0, description="Characters repeated between consecutive chunks")

    # Upsert
    batch_size: int = Field(default=100, gt=0, description="Chunks embedded and written per upsert call")

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    normalize_embeddings: bool = True

    # Vector store
    vector_store_backend: str = Field(
        default="chroma",
        description="Either 'chroma' (remote Chroma server) or 'memory' (in-process, local runs only)",
    )
    chroma_host: str = "localhost"
    chroma_port: int = 8000

    # Serving
    serve_host: str = "0.0.0.0"
    serve_port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _overlap_smaller_than_chunk(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self


def configure_logging(level: str | int = "INFO") -> None:
    """Install a root handler with a timestamped format (no-op if one exists)."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Singleton — import `settings` wherever needed.
settings = Settings()
