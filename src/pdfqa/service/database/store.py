"""Session-scoped vector store adapter on top of RavenDB vector search."""

import logging
from typing import Any

from ravendb import DocumentStore

from pdfqa.constants import DELETE_BATCH_SIZE, SESSION_SCAN_LIMIT, UPSERT_BATCH_SIZE
from pdfqa.errors import VectorStoreError
from pdfqa.service.database.config import RavenDBConfig
from pdfqa.service.database.models import DeleteResult, QueryMatch, VectorDocument, VectorRecord
from pdfqa.service.database.operations import create_document_store
from pdfqa.service.database.utils import batched, cosine_similarity

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("text", "source", "chunk_index", "session_id", "uploaded_at")


def _record_id(result: dict[str, Any]) -> str:
    return result.get("@metadata", {}).get("@id") or result.get("Id", "")


def _record_metadata(result: dict[str, Any]) -> dict[str, Any]:
    return {name: result.get(name) for name in METADATA_FIELDS}


class VectorStore:
    """Upserts, queries and deletes vector records scoped by session id.

    The adapter owns one initialized :class:`DocumentStore` for its lifetime.
    Every query carries an exact ``session_id`` filter so sessions never see
    each other's records.
    """

    def __init__(self, store: DocumentStore, collection: str | None = None) -> None:
        self.store = store
        self.collection = collection or RavenDBConfig.get_collection()

    @classmethod
    def from_config(
        cls,
        url: str | None = None,
        database: str | None = None,
        collection: str | None = None,
    ) -> "VectorStore":
        """Build an adapter connected with RavenDBConfig defaults."""
        return cls(create_document_store(url, database), collection)

    def close(self) -> None:
        self.store.close()

    def _session_query(self, session, session_id: str, wait_for_index: bool = False):
        query = session.query_collection(self.collection, object_type=dict)
        if wait_for_index:
            # Writes reach the index asynchronously; a scan must see all of them
            query = query.wait_for_non_stale_results()
        return query.where_equals("session_id", session_id)

    def upsert(self, records: list[VectorRecord]) -> int:
        """Write records in batches of 100, one batch at a time.

        Args:
            records: Records to write; existing ids are overwritten

        Returns:
            int: Number of records written

        Raises:
            VectorStoreError: If any batch fails. Earlier batches stay written.
        """
        if not records:
            return 0

        batches = batched(records, UPSERT_BATCH_SIZE)
        logger.info(f"📥 Upserting {len(records)} vectors in {len(batches)} batches")

        try:
            for batch_number, batch in enumerate(batches, 1):
                with self.store.open_session() as session:
                    for record in batch:
                        doc = VectorDocument.from_record(record)
                        session.store(doc, record.id)
                        session.advanced.get_metadata_for(doc)["@collection"] = self.collection
                    session.save_changes()
                logger.debug(f"Upserted batch {batch_number}/{len(batches)}")
        except Exception as e:
            logger.error(f"❌ Vector upsert failed: {e}", exc_info=True)
            raise VectorStoreError(str(e), provider_name="ravendb") from e

        logger.info("✅ Upsert complete")
        return len(records)

    def query(self, vector: list[float], top_k: int, session_id: str) -> list[QueryMatch]:
        """Return the records most similar to ``vector`` within one session.

        Args:
            vector: Query embedding
            top_k: Maximum number of matches
            session_id: Session whose records are searched

        Returns:
            list[QueryMatch]: At most ``top_k`` matches in the index's ranking order

        Raises:
            VectorStoreError: If the query fails
        """
        try:
            with self.store.open_session() as session:
                results = list(
                    self._session_query(session, session_id)
                    .and_also()
                    .vector_search("embedding", vector)
                    .order_by_score()
                    .take(top_k)
                )
        except Exception as e:
            logger.error(f"❌ Vector query failed for session {session_id}: {e}", exc_info=True)
            raise VectorStoreError(str(e), provider_name="ravendb") from e

        matches = []
        for result in results[:top_k]:
            index_score = result.get("@metadata", {}).get("@index-score")
            if index_score is not None:
                score = float(index_score)
            else:
                score = cosine_similarity(vector, result.get("embedding", []))
            matches.append(
                QueryMatch(id=_record_id(result), score=score, metadata=_record_metadata(result))
            )

        logger.info(f"🔍 Found {len(matches)} matches for session {session_id}")
        return matches

    def list_session_ids(self, session_id: str) -> list[str]:
        """List the ids of every record tagged with ``session_id``."""
        with self.store.open_session() as session:
            query = self._session_query(session, session_id, wait_for_index=True)
            results = list(query.take(SESSION_SCAN_LIMIT))
        return [_record_id(result) for result in results]

    def delete_by_session(self, session_id: str) -> DeleteResult:
        """Delete every record of a session, best effort.

        Failures are logged and reported on the result instead of raised, so
        an upload can proceed even when cleanup does not.

        Args:
            session_id: Session whose records are removed

        Returns:
            DeleteResult: Count of deleted records and an optional warning
        """
        logger.debug(f"Attempting to delete vectors for session: {session_id}")
        deleted = 0
        try:
            record_ids = self.list_session_ids(session_id)
            if not record_ids:
                logger.debug(f"No vectors found for session {session_id}")
                return DeleteResult()

            logger.debug(f"Found {len(record_ids)} vectors to delete for session {session_id}")
            batches = batched(record_ids, DELETE_BATCH_SIZE)
            for batch_number, batch in enumerate(batches, 1):
                with self.store.open_session() as session:
                    for record_id in batch:
                        session.delete(record_id)
                    session.save_changes()
                deleted += len(batch)
                logger.debug(f"Deleted batch {batch_number}/{len(batches)}")
        except Exception as e:
            warning = f"Failed to delete session vectors: {e}"
            logger.error(f"❌ {warning}")
            return DeleteResult(deleted=deleted, warning=warning)

        logger.info(f"🗑️  Deleted {deleted} vectors for session {session_id}")
        return DeleteResult(deleted=deleted)

    def first_record(self, session_id: str) -> dict[str, Any] | None:
        """Return the metadata of any one record in the session, or None.

        Raises:
            VectorStoreError: If the lookup fails
        """
        try:
            with self.store.open_session() as session:
                query = self._session_query(session, session_id, wait_for_index=True)
                results = list(query.take(1))
        except Exception as e:
            raise VectorStoreError(str(e), provider_name="ravendb") from e

        if not results:
            return None
        return _record_metadata(results[0])
