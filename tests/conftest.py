"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
from langchain_core.embeddings import Embeddings

from vector_ingest.store.memory_store import InMemoryVectorStore


# ── Fake embedding models ──────────────────────────────────────────────


class IndexEmbeddings(Embeddings):
    """Returns ``[i]`` for the *i*-th text of each call and records every batch."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [[float(i)] for i in range(len(texts))]

    def embed_query(self, text: str) -> list[float]:
        return [0.0]


class FailingEmbeddings(IndexEmbeddings):
    """Behaves like :class:`IndexEmbeddings` until call number *fail_on* (1-based)."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if len(self.calls) + 1 == self.fail_on:
            self.calls.append(list(texts))
            raise RuntimeError("model server unavailable")
        return super().embed_documents(texts)


@pytest.fixture()
def embedder() -> IndexEmbeddings:
    return IndexEmbeddings()


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


async def _drain(events: AsyncIterator) -> list:
    return [event async for event in events]


def collect(events: AsyncIterator) -> list:
    """Run an async event stream to the end and return everything it yielded."""
    return asyncio.run(_drain(events))


@pytest.fixture()
def collect_events():
    return collect


async def _drain_until_error(events: AsyncIterator) -> tuple[list, BaseException | None]:
    seen = []
    try:
        async for event in events:
            seen.append(event)
    except Exception as exc:
        return seen, exc
    return seen, None


@pytest.fixture()
def collect_until_error():
    """Like ``collect_events`` but returns ``(events, exception_or_None)``."""
    return lambda events: asyncio.run(_drain_until_error(events))


@pytest.fixture()
def failing_embedder():
    """Factory for an embedder whose *n*-th call raises."""
    return FailingEmbeddings
