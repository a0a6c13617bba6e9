"""Pytest configuration and shared fixtures for the test suite."""

import requests

import fitz  # PyMuPDF
import pytest

from pdfqa.errors import VectorStoreError
from pdfqa.service.database import DeleteResult, QueryMatch, VectorRecord, cosine_similarity
from pdfqa.service.embeddings import EmbeddingClient
from pdfqa.service.pipeline import SessionPipeline


# Service availability checks
def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible.

    Returns:
        True if RavenDB is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code == 200 or response.status_code == 401  # Auth required is OK
    except requests.RequestException:
        return False


def text_vector(text: str, dimensions: int = 8) -> list[float]:
    """Deterministic toy embedding: letter frequencies folded into a few slots."""
    vector = [0.0] * dimensions
    for char in text.lower():
        if char.isalpha():
            vector[(ord(char) - ord("a")) % dimensions] += 1.0
    return vector


class FakeEmbeddingService:
    """In-process stand-in for the Gemini embedding API.

    Texts listed in ``fail_texts`` fail on single calls; ``fail_batches``
    makes every batch call raise.
    """

    def __init__(self, fail_batches: bool = False, fail_texts: set[str] | None = None) -> None:
        self.fail_batches = fail_batches
        self.fail_texts = fail_texts or set()
        self.batch_calls: list[list[str]] = []
        self.single_calls: list[str] = []

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        if self.fail_batches:
            raise RuntimeError("batch embedding unavailable")
        return [text_vector(text) for text in texts]

    def embed_one(self, text: str) -> list[float]:
        self.single_calls.append(text)
        if text in self.fail_texts:
            raise RuntimeError("cannot embed this text")
        return text_vector(text)


class FakeGenerationService:
    """Records prompts and returns a fixed answer."""

    def __init__(self, answer: str = "Generated answer", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    async def generate_response(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class InMemoryVectorStore:
    """Dictionary-backed vector index with the VectorStore interface."""

    def __init__(self) -> None:
        self.records: dict[str, VectorRecord] = {}
        self.fail_deletes = False
        self.fail_upserts = False
        self.closed = False

    def upsert(self, records: list[VectorRecord]) -> int:
        if self.fail_upserts:
            raise VectorStoreError("index unavailable", provider_name="ravendb")
        for record in records:
            self.records[record.id] = record
        return len(records)

    def query(self, vector: list[float], top_k: int, session_id: str) -> list[QueryMatch]:
        matches = [
            QueryMatch(
                id=record.id,
                score=cosine_similarity(vector, record.values),
                metadata=dict(record.metadata),
            )
            for record in self.records.values()
            if record.metadata.get("session_id") == session_id
        ]
        matches.sort(key=lambda match: match.score, reverse=True)
        return matches[:top_k]

    def delete_by_session(self, session_id: str) -> DeleteResult:
        if self.fail_deletes:
            return DeleteResult(warning="Failed to delete session vectors: timeout")
        ids = [
            record_id
            for record_id, record in self.records.items()
            if record.metadata.get("session_id") == session_id
        ]
        for record_id in ids:
            del self.records[record_id]
        return DeleteResult(deleted=len(ids))

    def first_record(self, session_id: str) -> dict | None:
        for record in self.records.values():
            if record.metadata.get("session_id") == session_id:
                return dict(record.metadata)
        return None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def embedding_service() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def generation_service() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def documents() -> dict[bytes, str]:
    """Maps fake PDF bytes to the text the fake extractor returns for them."""
    return {}


@pytest.fixture
def pipeline(embedding_service, vector_store, generation_service, documents) -> SessionPipeline:
    """Session pipeline wired to in-process fakes.

    Register a document by adding ``documents[b"pdf-bytes"] = "text"``.
    """
    return SessionPipeline(
        embedding_client=EmbeddingClient(embedding_service, batch_delay=0),
        vector_store=vector_store,
        generation_service=generation_service,
        extract_text=lambda data: documents.get(data, ""),
    )


@pytest.fixture
def make_pdf():
    """Factory fixture building a real PDF from lines of text.

    Returns:
        Function taking a list of lines and returning PDF bytes
    """

    def _make_pdf(lines: list[str]) -> bytes:
        doc = fitz.open()
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((72, 72 + 14 * i), line)
        data = doc.tobytes()
        doc.close()
        return data

    return _make_pdf


@pytest.fixture
def mock_embedding():
    """Provide a simple mock embedding vector.

    Returns:
        List of floats representing an embedding vector
    """
    return [0.1, 0.2, 0.3, 0.15, -0.1, 0.05, 0.25, -0.05]
