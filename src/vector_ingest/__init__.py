"""Document ingestion into vector indexes with streamed progress reporting."""

__version__ = "0.1.0"
