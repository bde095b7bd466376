"""Run the ingestion API with uvicorn: ``python -m vector_ingest.serving``."""

from __future__ import annotations

import uvicorn

from vector_ingest.config import configure_logging, settings

if __name__ == "__main__":
    configure_logging(settings.log_level)
    uvicorn.run(
        "vector_ingest.serving.app:app",
        host=settings.serve_host,
        port=settings.serve_port,
        log_level=settings.log_level.lower(),
    )
