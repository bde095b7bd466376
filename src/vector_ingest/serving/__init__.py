"""
Serving — FastAPI application for the ingestion pipeline.

This module exposes ingestion over HTTP with a streamed NDJSON progress
response, plus a file-listing endpoint for the documents directory.
"""
