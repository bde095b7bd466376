"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import PyPDFLoader, TextLoader

from vector_ingest.errors import SourceError
from vector_ingest.ingestion.models import SourceDocument

if TYPE_CHECKING:
    from langchain_core.document_loaders import BaseLoader

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".txt", ".md")


def _loader_for(path: Path) -> BaseLoader:
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        # One document per file, pages joined.
        return PyPDFLoader(str(path), mode="single")
    if suffix in (".txt", ".md"):
        return TextLoader(str(path), autodetect_encoding=True)
    raise SourceError(
        f"{path}: unsupported extension {path.suffix!r} "
        f"(supported: {', '.join(SUPPORTED_EXTENSIONS)})"
    )


def _require_dir(path: str | Path) -> Path:
    root = Path(path)
    if not root.is_dir():
        raise SourceError(f"documents directory {str(root)!r} does not exist")
    return root


def load_file(path: str | Path) -> SourceDocument:
    """Load a single PDF, text or Markdown file.

    Raises
    ------
    SourceError
        If the extension is unsupported or the file cannot be read.
    """
    path = Path(path)
    try:
        pages = _loader_for(path).load()
    except SourceError:
        raise
    except Exception as exc:
        raise SourceError(f"{path}: failed to load: {exc}") from exc
    text = "\n".join(page.page_content for page in pages)
    return SourceDocument(source_id=str(path), text=text)


def iter_documents(path: str | Path) -> Iterator[SourceDocument]:
    """Lazily load every file under *path*, one :class:`SourceDocument` each.

    Files are visited recursively in sorted relative-path order; dotfiles
    and anything inside dot-directories are skipped.  A file is only read
    when the consumer asks for it, so a bad file aborts ingestion right
    before that file rather than up front.

    Parameters
    ----------
    path:
        Root directory containing source documents.

    Raises
    ------
    SourceError
        If *path* is not a directory or a file cannot be loaded.
    """
    root = _require_dir(path)
    files = sorted(
        p
        for p in root.rglob("*")
        if p.is_file() and not any(part.startswith(".") for part in p.relative_to(root).parts)
    )
    logger.info("Found %d files under %s", len(files), root)
    for file_path in files:
        yield load_file(file_path)


def list_files(path: str | Path) -> list[str]:
    """Return the sorted names of the entries directly inside *path*."""
    root = _require_dir(path)
    return sorted(entry.name for entry in root.iterdir())
