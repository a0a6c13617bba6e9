"""Vector index access backed by RavenDB.

This package provides:
- Configuration management (RavenDBConfig)
- Document store creation, database creation and record counts
- The session-scoped VectorStore adapter (upsert, query, delete_by_session)
- Record and result models

Usage:
    from pdfqa.service.database import VectorStore, VectorRecord

    store = VectorStore.from_config()
    store.upsert([VectorRecord(id="s1_0", values=vector, metadata={...})])
"""

from pdfqa.service.database.config import RavenDBConfig
from pdfqa.service.database.models import DeleteResult, QueryMatch, VectorDocument, VectorRecord
from pdfqa.service.database.operations import (
    count_documents,
    create_database,
    create_document_store,
    database_exists,
)
from pdfqa.service.database.store import VectorStore
from pdfqa.service.database.utils import cosine_similarity

__all__ = [
    # Config
    "RavenDBConfig",
    # Models
    "DeleteResult",
    "QueryMatch",
    "VectorDocument",
    "VectorRecord",
    # Operations
    "create_document_store",
    "database_exists",
    "create_database",
    "count_documents",
    # Adapter
    "VectorStore",
    # Utils
    "cosine_similarity",
]
