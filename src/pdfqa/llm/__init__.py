"""LLM service abstraction layer for pdfqa.

This package provides the remote services the pipeline depends on:
- EmbeddingService: batch and single-text embeddings
- GenerationService: answer synthesis from a combined prompt
- GeminiService: Google Gemini implementation of both

Usage:
    from pdfqa.llm import get_llm_service

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
"""

from pdfqa.llm.base import EmbeddingService, GenerationService
from pdfqa.llm.factory import get_llm_service
from pdfqa.llm.gemini import GeminiService

__all__ = [
    "EmbeddingService",
    "GenerationService",
    "GeminiService",
    "get_llm_service",
]
