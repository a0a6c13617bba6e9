"""Ingestion, embedding, vector storage and session pipeline services."""
