"""Application-wide constants and defaults for pdfqa.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os

# =============================================================================
# File Upload Limits
# =============================================================================
MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024  # 50MB
ALLOWED_EXTENSIONS = {"pdf"}
DEFAULT_UPLOAD_FOLDER = "/tmp/pdfqa_uploads"

# =============================================================================
# Text Cleaning and Chunking
# =============================================================================
MIN_TEXT_LENGTH = 10  # Shorter cleaned text is treated as noise
MAX_TEXT_LENGTH = 8000  # Safety cap on cleaned text
DEFAULT_CHUNK_SIZE = 1000  # Characters per raw window
CHUNK_OVERLAP = 200  # Fixed overlap between consecutive windows

# =============================================================================
# Embedding Settings
# =============================================================================
EMBEDDING_BATCH_SIZE = 10
EMBEDDING_BATCH_DELAY_SECONDS = 0.1  # Pause between batches, not after the last one
DEFAULT_EMBEDDING_DIMENSIONS = 768
DEFAULT_EMBEDDING_MODEL = "text-embedding-004"

# =============================================================================
# Vector Store Settings
# =============================================================================
UPSERT_BATCH_SIZE = 100
DELETE_BATCH_SIZE = 1000
SESSION_SCAN_LIMIT = 10000  # Upper bound on records listed for one session
DEFAULT_VECTOR_COLLECTION = "VectorRecords"
DEFAULT_RAVENDB_URL = "http://localhost:8080"
DEFAULT_RAVENDB_DATABASE = "pdfqa"

# =============================================================================
# LLM Settings
# =============================================================================
DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_TOP_K = 4  # Default number of matches used to answer a question
CONTEXT_SEPARATOR = "\n---\n"

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant. Use the provided context from the uploaded PDF "
    "document to answer the question. If the answer is not contained within the "
    "context, say that you cannot find the answer in the provided document. Answer "
    "concisely and accurately based only on the document content."
)

NO_RELEVANT_INFO_ANSWER = (
    "I couldn't find any relevant information in the current document. "
    "Please make sure you have uploaded a PDF document for this session."
)

# =============================================================================
# Server Settings
# =============================================================================
DEFAULT_SERVER_API_KEY = "dev_token"

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 100  # Characters to show in log previews


def get_embedding_model() -> str:
    """Get the embedding model name.

    Returns:
        str: EMBEDDING_MODEL from the environment, or the Gemini default.
    """
    return os.getenv("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)


def get_embedding_dimensions() -> int:
    """Get the embedding vector dimension.

    Returns:
        int: EMBEDDING_DIMENSIONS from the environment, or 768.
    """
    return int(os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS)))
