"""
Ingestion — document loading, chunking, embedding and batched upserts.

This module is responsible for the pipeline that converts raw documents
(PDF, plain text, Markdown) into embedded chunks stored in a vector index,
reporting progress after every batch.
"""
