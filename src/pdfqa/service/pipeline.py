"""Session pipeline: ingest a PDF into a session and answer questions about it.

Ingest:  delete stale session vectors -> extract -> chunk -> embed -> upsert
Ask:     clean question -> embed -> session-scoped query -> prompt -> generate

All remote services are injected, so tests can substitute fakes for the
embedding service, the vector index and the generation model.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pdfqa.constants import (
    CONTENT_PREVIEW_LENGTH,
    CONTEXT_SEPARATOR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TOP_K,
    NO_RELEVANT_INFO_ANSWER,
    SYSTEM_INSTRUCTION,
)
from pdfqa.errors import (
    EmptyDocumentError,
    EmptyQuestionError,
    GenerationServiceError,
    MissingInputError,
    NoContentError,
)
from pdfqa.llm import get_llm_service
from pdfqa.llm.base import GenerationService
from pdfqa.service.database import DeleteResult, QueryMatch, VectorRecord, VectorStore
from pdfqa.service.embeddings import EmbeddingClient
from pdfqa.service.ingest import chunk_text, clean_text, extract_text_from_pdf

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """Result of ingesting one document into a session."""

    uploaded_chunks: int
    session_id: str
    warning: str | None = None


@dataclass
class AskResult:
    """Answer to a question plus the sources it was drawn from."""

    answer: str
    sources: list[dict[str, Any]] = field(default_factory=list)
    session_id: str | None = None


@dataclass
class SessionInfo:
    """Whether a session holds a document, and which one."""

    session_id: str
    exists: bool
    document: str | None = None
    uploaded_at: str | None = None


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class SessionLocks:
    """One lock per session id, held only while some caller needs it.

    An entry is created on first use and removed when its last holder
    releases it, so the table never outgrows the sessions in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        """Serialize the enclosed block with other holders of ``session_id``."""
        with self._guard:
            entry = self._locks.setdefault(session_id, _LockEntry())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[session_id]


def build_prompt(question: str, matches: list[QueryMatch]) -> str:
    """Combine the instruction preamble, retrieved context and question.

    Args:
        question: The question as the user typed it
        matches: Matches in ranked order

    Returns:
        str: The full prompt sent to the generation service
    """
    context = CONTEXT_SEPARATOR.join(match.text for match in matches)
    user_prompt = f"Context from the uploaded document:\n{context}\n\nQuestion: {question}"
    return f"{SYSTEM_INSTRUCTION}\n\n{user_prompt}"


class SessionPipeline:
    """Orchestrates ingestion and question answering for sessions."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        generation_service: GenerationService,
        extract_text: Callable[[bytes], str] = extract_text_from_pdf,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.embedding_client = embedding_client
        self.vector_store = vector_store
        self.generation_service = generation_service
        self.extract_text = extract_text
        self.chunk_size = chunk_size
        self.locks = SessionLocks()

    def ingest(self, data: bytes, filename: str, session_id: str) -> IngestResult:
        """Replace the session's document with a new PDF.

        Args:
            data: Raw PDF bytes
            filename: Original filename, stored as the record source
            session_id: Session that will own the vectors

        Returns:
            IngestResult: Number of vectors written

        Raises:
            MissingInputError: If data, filename or session id is missing
            EmptyDocumentError: If the PDF has no extractable text
            NoContentError: If no chunk survives cleaning
            EmbeddingServiceError: If embedding fails outright
            VectorStoreError: If the upsert fails
        """
        if not data or not filename:
            raise MissingInputError("No file uploaded")
        if not session_id:
            raise MissingInputError("Missing session ID")

        with self.locks.hold(session_id):
            logger.info(f"📄 Processing upload of {filename} for session: {session_id}")

            cleanup = self.vector_store.delete_by_session(session_id)
            if not cleanup.ok:
                logger.warning(f"⚠️ Continuing upload despite cleanup failure: {cleanup.warning}")

            text = self.extract_text(data) or ""
            if not text.strip():
                raise EmptyDocumentError()
            logger.debug(f"Extracted text length: {len(text)} characters")

            chunks = chunk_text(text, self.chunk_size)
            logger.debug(f"Total chunks created: {len(chunks)}")
            if not chunks:
                raise NoContentError()

            results = self.embedding_client.embed(chunks)
            embedded = [result for result in results if not result.skipped]
            if len(embedded) < len(chunks):
                logger.warning(f"⚠️ {len(chunks) - len(embedded)} chunks were not embedded")

            uploaded_at = datetime.now(timezone.utc).isoformat()
            records = [
                VectorRecord(
                    id=f"{session_id}_{index}",
                    values=result.vector,
                    metadata={
                        "text": result.text,
                        "source": filename,
                        "chunk_index": index,
                        "session_id": session_id,
                        "uploaded_at": uploaded_at,
                    },
                )
                for index, result in enumerate(embedded)
            ]

            uploaded = self.vector_store.upsert(records)

        logger.info(f"✅ Uploaded {uploaded} chunks for session {session_id}")
        return IngestResult(uploaded_chunks=uploaded, session_id=session_id, warning=cleanup.warning)

    async def ask(self, question: str, session_id: str, top_k: int = DEFAULT_TOP_K) -> AskResult:
        """Answer a question from the session's document.

        Args:
            question: The user's question
            session_id: Session to search
            top_k: Number of matches used as context

        Returns:
            AskResult: The answer and its sources. A session without matching
                records gets a fixed "no relevant information" answer.

        Raises:
            MissingInputError: If question or session id is missing, or top_k
                is not a positive integer
            EmptyQuestionError: If the question cleans to nothing
            EmbeddingServiceError: If the question cannot be embedded
            VectorStoreError: If the query fails
            GenerationServiceError: If answer generation fails
        """
        if not question:
            raise MissingInputError("Missing question")
        if not session_id:
            raise MissingInputError("Missing session ID")
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
            raise MissingInputError("topK must be a positive integer")

        cleaned_question = clean_text(question)
        if not cleaned_question:
            raise EmptyQuestionError()

        logger.info(f"🔍 Question for session {session_id}: '{question[:CONTENT_PREVIEW_LENGTH]}'")

        with self.locks.hold(session_id):
            vector = self.embedding_client.embed_query(cleaned_question)
            matches = self.vector_store.query(vector, top_k, session_id)

        if not matches:
            return AskResult(answer=NO_RELEVANT_INFO_ANSWER, sources=[], session_id=session_id)

        prompt = build_prompt(question, matches)
        try:
            answer = await self.generation_service.generate_response(prompt)
        except Exception as e:
            raise GenerationServiceError(str(e), provider_name="gemini") from e

        sources = [
            {
                "source": match.metadata.get("source"),
                "chunk_index": match.metadata.get("chunk_index"),
                "session_id": match.metadata.get("session_id"),
            }
            for match in matches
        ]
        return AskResult(answer=answer, sources=sources, session_id=session_id)

    def clear_session(self, session_id: str) -> DeleteResult:
        """Remove every vector of a session, best effort.

        Raises:
            MissingInputError: If session id is missing
        """
        if not session_id:
            raise MissingInputError("Missing session ID")

        logger.info(f"🧹 Clearing session: {session_id}")
        with self.locks.hold(session_id):
            return self.vector_store.delete_by_session(session_id)

    def close(self) -> None:
        """Release the vector store connection."""
        self.vector_store.close()

    def get_session_info(self, session_id: str) -> SessionInfo:
        """Report whether a session has a document and when it was uploaded."""
        if not session_id:
            raise MissingInputError("Missing session ID")

        record = self.vector_store.first_record(session_id)
        if record is None:
            return SessionInfo(session_id=session_id, exists=False)
        return SessionInfo(
            session_id=session_id,
            exists=True,
            document=record.get("source"),
            uploaded_at=record.get("uploaded_at"),
        )


def create_pipeline(llm_config: dict | None = None) -> SessionPipeline:
    """Build a pipeline wired to Gemini and RavenDB from environment config.

    Args:
        llm_config: Optional overrides passed to get_llm_service

    Returns:
        SessionPipeline: Ready-to-use pipeline sharing one Gemini client
    """
    service = get_llm_service(llm_config)
    return SessionPipeline(
        embedding_client=EmbeddingClient(service),
        vector_store=VectorStore.from_config(),
        generation_service=service,
    )
