"""Tests for the session pipeline using in-process fakes."""

import threading
from unittest.mock import MagicMock, patch

import pytest

from pdfqa.constants import NO_RELEVANT_INFO_ANSWER, SYSTEM_INSTRUCTION
from pdfqa.errors import (
    EmptyDocumentError,
    EmptyQuestionError,
    GenerationServiceError,
    MissingInputError,
    NoContentError,
    VectorStoreError,
)
from pdfqa.service.database import QueryMatch
from pdfqa.service.ingest import chunk_text
from pdfqa.service.pipeline import SessionLocks, build_prompt, create_pipeline

WORDS_2000 = "".join(f"word{i:05d} " for i in range(200))


class TestIngest:
    """Tests for SessionPipeline.ingest."""

    def test_ingest_1500_characters_gives_two_records(self, pipeline, vector_store, documents):
        """Test that a 1500 character document yields S1_0 and S1_1."""
        documents[b"pdf-1"] = "abcdefghij" * 150

        result = pipeline.ingest(b"pdf-1", "paper.pdf", "S1")

        assert result.uploaded_chunks == 2
        assert result.session_id == "S1"
        assert result.warning is None
        assert sorted(vector_store.records) == ["S1_0", "S1_1"]

        first = vector_store.records["S1_0"].metadata
        second = vector_store.records["S1_1"].metadata
        assert first["source"] == "paper.pdf"
        assert first["session_id"] == "S1"
        assert (first["chunk_index"], second["chunk_index"]) == (0, 1)
        assert len(first["text"]) == 1000
        assert len(second["text"]) == 700
        assert first["uploaded_at"] == second["uploaded_at"]

    def test_reupload_replaces_previous_document(self, pipeline, vector_store, documents):
        """Test that uploading again leaves only the new document's records."""
        documents[b"old"] = WORDS_2000
        documents[b"new"] = "A much shorter replacement document."

        pipeline.ingest(b"old", "old.pdf", "S1")
        assert len(vector_store.records) == 3

        result = pipeline.ingest(b"new", "new.pdf", "S1")

        assert result.uploaded_chunks == 1
        assert list(vector_store.records) == ["S1_0"]
        assert vector_store.records["S1_0"].metadata["source"] == "new.pdf"

    def test_ingest_does_not_touch_other_sessions(self, pipeline, vector_store, documents):
        """Test that ingesting into S1 leaves S2 intact."""
        documents[b"a"] = "Document for the first session."
        documents[b"b"] = "Document for the second session."

        pipeline.ingest(b"b", "b.pdf", "S2")
        pipeline.ingest(b"a", "a.pdf", "S1")

        assert sorted(vector_store.records) == ["S1_0", "S2_0"]

    def test_ingest_continues_after_cleanup_failure(self, pipeline, vector_store, documents):
        """Test that a failed delete is reported but does not abort the upload."""
        documents[b"pdf"] = "Some valid document content."
        vector_store.fail_deletes = True

        result = pipeline.ingest(b"pdf", "paper.pdf", "S1")

        assert result.uploaded_chunks == 1
        assert result.warning.startswith("Failed to delete session vectors")

    def test_ingest_skipped_chunks_keep_text_aligned(
        self, pipeline, vector_store, embedding_service, documents
    ):
        """Test that each stored record holds the text of its own vector."""
        documents[b"pdf"] = WORDS_2000
        chunks = chunk_text(WORDS_2000)
        assert len(chunks) == 3
        embedding_service.fail_batches = True
        embedding_service.fail_texts = {chunks[1]}

        result = pipeline.ingest(b"pdf", "paper.pdf", "S1")

        assert result.uploaded_chunks == 2
        assert vector_store.records["S1_0"].metadata["text"] == chunks[0]
        assert vector_store.records["S1_1"].metadata["text"] == chunks[2]
        assert vector_store.records["S1_1"].metadata["chunk_index"] == 1

    def test_ingest_empty_document(self, pipeline, documents):
        """Test that whitespace-only extraction raises EmptyDocumentError."""
        documents[b"blank"] = "   \n\n  "

        with pytest.raises(EmptyDocumentError, match="no readable text"):
            pipeline.ingest(b"blank", "blank.pdf", "S1")

    def test_ingest_noise_only_document(self, pipeline, documents):
        """Test that a document whose chunks all clean away raises NoContentError."""
        documents[b"noise"] = "\x01\x02 ™ …"

        with pytest.raises(NoContentError):
            pipeline.ingest(b"noise", "noise.pdf", "S1")

    @pytest.mark.parametrize(
        "data,filename,session_id,message",
        [
            (b"", "paper.pdf", "S1", "No file uploaded"),
            (b"pdf", "", "S1", "No file uploaded"),
            (b"pdf", "paper.pdf", "", "Missing session ID"),
        ],
    )
    def test_ingest_missing_input(self, pipeline, data, filename, session_id, message):
        """Test that missing arguments raise MissingInputError."""
        with pytest.raises(MissingInputError, match=message):
            pipeline.ingest(data, filename, session_id)

    def test_ingest_upsert_failure_propagates(self, pipeline, vector_store, documents):
        """Test that a failed upsert surfaces as VectorStoreError."""
        documents[b"pdf"] = "Some valid document content."
        vector_store.fail_upserts = True

        with pytest.raises(VectorStoreError):
            pipeline.ingest(b"pdf", "paper.pdf", "S1")


class TestAsk:
    """Tests for SessionPipeline.ask."""

    @pytest.mark.asyncio
    async def test_ask_session_without_document(self, pipeline, generation_service):
        """Test the fixed answer for a session with no records."""
        result = await pipeline.ask("What is this about?", "S2")

        assert result.answer == NO_RELEVANT_INFO_ANSWER
        assert result.sources == []
        assert result.session_id == "S2"
        assert generation_service.prompts == []

    @pytest.mark.asyncio
    async def test_ask_only_sees_own_session(self, pipeline, documents, generation_service):
        """Test that S2 cannot retrieve S1's document."""
        documents[b"pdf"] = "abcdefghij" * 150
        pipeline.ingest(b"pdf", "paper.pdf", "S1")

        result = await pipeline.ask("abcdefghij question", "S2")

        assert result.answer == NO_RELEVANT_INFO_ANSWER
        assert generation_service.prompts == []

    @pytest.mark.asyncio
    async def test_ask_returns_answer_and_sources(self, pipeline, documents, generation_service):
        """Test a full ask round trip."""
        documents[b"pdf"] = "abcdefghij" * 150
        pipeline.ingest(b"pdf", "paper.pdf", "S1")

        result = await pipeline.ask("What do the letters say?", "S1")

        assert result.answer == "Generated answer"
        assert result.session_id == "S1"
        assert sorted(source["chunk_index"] for source in result.sources) == [0, 1]
        assert all(source["source"] == "paper.pdf" for source in result.sources)
        assert all(source["session_id"] == "S1" for source in result.sources)

        prompt = generation_service.prompts[0]
        assert prompt.startswith(SYSTEM_INSTRUCTION)
        assert "Context from the uploaded document:" in prompt
        assert "\n---\n" in prompt
        assert prompt.endswith("Question: What do the letters say?")

    @pytest.mark.asyncio
    async def test_ask_respects_top_k(self, pipeline, documents):
        """Test that at most top_k matches are used."""
        documents[b"pdf"] = WORDS_2000
        pipeline.ingest(b"pdf", "paper.pdf", "S1")

        result = await pipeline.ask("which word?", "S1", top_k=1)

        assert len(result.sources) == 1

    @pytest.mark.asyncio
    async def test_ask_sources_follow_match_order(self, pipeline, generation_service):
        """Test that sources keep the ranking returned by the vector store."""
        matches = [
            QueryMatch(id="S1_3", score=0.9, metadata={"text": "third", "source": "p.pdf",
                                                       "chunk_index": 3, "session_id": "S1"}),
            QueryMatch(id="S1_1", score=0.5, metadata={"text": "first", "source": "p.pdf",
                                                       "chunk_index": 1, "session_id": "S1"}),
        ]
        pipeline.vector_store = MagicMock()
        pipeline.vector_store.query.return_value = matches

        result = await pipeline.ask("Where is it described?", "S1")

        assert [source["chunk_index"] for source in result.sources] == [3, 1]
        assert "third\n---\nfirst" in generation_service.prompts[0]
        pipeline.vector_store.query.assert_called_once()
        assert pipeline.vector_store.query.call_args.args[1:] == (4, "S1")

    @pytest.mark.asyncio
    async def test_ask_generation_failure(self, pipeline, documents, generation_service):
        """Test that generation errors are wrapped."""
        documents[b"pdf"] = "Some valid document content."
        pipeline.ingest(b"pdf", "paper.pdf", "S1")
        generation_service.error = RuntimeError("quota exceeded")

        with pytest.raises(GenerationServiceError, match="quota exceeded"):
            await pipeline.ask("What is this?", "S1")

    @pytest.mark.asyncio
    async def test_ask_question_that_cleans_to_nothing(self, pipeline):
        """Test EmptyQuestionError for a noise-only question."""
        with pytest.raises(EmptyQuestionError, match="Question contains no valid content"):
            await pipeline.ask("why?", "S1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question,session_id", [("", "S1"), (None, "S1"), ("A question?", "")])
    async def test_ask_missing_input(self, pipeline, question, session_id):
        """Test that a missing question or session id is rejected."""
        with pytest.raises(MissingInputError):
            await pipeline.ask(question, session_id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("top_k", ["abc", None, [1], 0, -2, True])
    async def test_ask_rejects_bad_top_k(self, pipeline, generation_service, top_k):
        """Test that topK must be a positive integer."""
        with pytest.raises(MissingInputError, match="topK must be a positive integer"):
            await pipeline.ask("What is the main result?", "S1", top_k)

        assert generation_service.prompts == []
        assert len(pipeline.locks) == 0


class TestSessionManagement:
    """Tests for clearing and inspecting sessions."""

    def test_clear_session(self, pipeline, vector_store, documents):
        """Test that clearing removes only the target session."""
        documents[b"a"] = "Document for the first session."
        documents[b"b"] = "Document for the second session."
        pipeline.ingest(b"a", "a.pdf", "S1")
        pipeline.ingest(b"b", "b.pdf", "S2")

        result = pipeline.clear_session("S1")

        assert result.deleted == 1
        assert result.ok
        assert list(vector_store.records) == ["S2_0"]
        assert vector_store.query([0.0] * 8, 4, "S1") == []

    def test_clear_empty_session(self, pipeline):
        """Test that clearing an unknown session deletes nothing."""
        result = pipeline.clear_session("never-used")

        assert result.deleted == 0
        assert result.warning is None

    def test_clear_session_requires_id(self, pipeline):
        """Test that a missing session id is rejected."""
        with pytest.raises(MissingInputError):
            pipeline.clear_session("")

    def test_session_info(self, pipeline, documents):
        """Test that session info reports the uploaded document."""
        documents[b"pdf"] = "Some valid document content."
        pipeline.ingest(b"pdf", "paper.pdf", "S1")

        info = pipeline.get_session_info("S1")

        assert info.exists
        assert info.document == "paper.pdf"
        assert info.uploaded_at

    def test_session_info_unknown_session(self, pipeline):
        """Test that an empty session does not exist."""
        info = pipeline.get_session_info("S9")

        assert not info.exists
        assert info.document is None

    def test_session_locks_do_not_accumulate(self, pipeline, documents):
        """Test that many short-lived sessions leave no lock entries behind."""
        documents[b"pdf"] = "Some valid document content."
        pipeline.ingest(b"pdf", "paper.pdf", "S1")
        for i in range(1000):
            pipeline.clear_session(f"s{i}")

        assert len(pipeline.locks) == 0

    def test_close_releases_vector_store(self, pipeline, vector_store):
        """Test that closing the pipeline closes its store."""
        pipeline.close()

        assert vector_store.closed


class TestHelpers:
    """Tests for prompt building and session locks."""

    def test_build_prompt(self):
        """Test the prompt layout."""
        matches = [
            QueryMatch(id="a", score=1.0, metadata={"text": "alpha"}),
            QueryMatch(id="b", score=0.5, metadata={"text": "beta"}),
        ]

        prompt = build_prompt("What?", matches)

        assert prompt == (
            f"{SYSTEM_INSTRUCTION}\n\nContext from the uploaded document:\n"
            "alpha\n---\nbeta\n\nQuestion: What?"
        )

    def test_session_locks_held_only_while_in_use(self):
        """Test that a session's lock is registered while held and dropped after."""
        locks = SessionLocks()

        with locks.hold("S1"):
            with locks.hold("S2"):
                assert len(locks) == 2
            assert len(locks) == 1

        assert len(locks) == 0

    def test_session_locks_released_after_error(self):
        """Test that an exception inside the block still frees the entry."""
        locks = SessionLocks()

        with pytest.raises(RuntimeError):
            with locks.hold("S1"):
                raise RuntimeError("boom")

        assert len(locks) == 0

    def test_session_locks_serialize_same_session(self):
        """Test that a second holder of the same session waits for the first."""
        locks = SessionLocks()
        order = []
        entered = threading.Event()

        def second():
            entered.set()
            with locks.hold("S1"):
                order.append("second")

        with locks.hold("S1"):
            worker = threading.Thread(target=second)
            worker.start()
            entered.wait()
            order.append("first")
        worker.join()

        assert order == ["first", "second"]
        assert len(locks) == 0

    @patch("pdfqa.service.pipeline.VectorStore.from_config")
    @patch("pdfqa.service.pipeline.get_llm_service")
    def test_create_pipeline_shares_one_service(self, mock_get_service, mock_from_config):
        """Test that embedding and generation use the same Gemini service."""
        service = MagicMock()
        mock_get_service.return_value = service

        pipeline = create_pipeline()

        assert pipeline.generation_service is service
        assert pipeline.embedding_client.service is service
        assert pipeline.vector_store is mock_from_config.return_value
