"""Data models for vector records and query results."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class VectorRecord:
    """The unit written to the vector index.

    Attributes:
        id: Record id, ``{session_id}_{chunk_index}``
        values: Embedding vector
        metadata: text, source, chunk_index, session_id, uploaded_at
    """

    id: str
    values: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class VectorDocument:
    """RavenDB entity for a stored vector record.

    Note: eq=False keeps instances hashable by identity, which RavenDB's
    session entity tracking requires.
    """

    Id: str | None = None
    text: str = ""
    source: str = ""
    chunk_index: int = 0
    session_id: str = ""
    uploaded_at: str = ""
    embedding: list[float] = field(default_factory=list)

    def __hash__(self) -> int:
        """Hash by object identity for RavenDB session tracking."""
        return id(self)

    @classmethod
    def from_record(cls, record: VectorRecord) -> "VectorDocument":
        metadata = record.metadata
        return cls(
            Id=record.id,
            text=metadata.get("text", ""),
            source=metadata.get("source", ""),
            chunk_index=metadata.get("chunk_index", 0),
            session_id=metadata.get("session_id", ""),
            uploaded_at=metadata.get("uploaded_at", ""),
            embedding=record.values,
        )


@dataclass
class QueryMatch:
    """A record returned by a similarity query, with its score."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.metadata.get("text", "")


@dataclass
class DeleteResult:
    """Outcome of a best-effort session deletion.

    Attributes:
        deleted: Number of records removed
        warning: Failure message when deletion stopped early, else None
    """

    deleted: int = 0
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.warning is None
