"""Batched embedding with per-item fallback on batch failure."""

import logging
import time
from dataclasses import dataclass

from pdfqa.constants import (
    CONTENT_PREVIEW_LENGTH,
    EMBEDDING_BATCH_DELAY_SECONDS,
    EMBEDDING_BATCH_SIZE,
)
from pdfqa.errors import EmbeddingServiceError, NoValidInputError
from pdfqa.llm.base import EmbeddingService
from pdfqa.service.ingest import clean_text

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingResult:
    """Outcome of embedding one cleaned text.

    Attributes:
        text: The cleaned text that was sent to the service
        vector: The embedding, or None when the text was skipped
        skipped: True when every attempt to embed this text failed
    """

    text: str
    vector: list[float] | None = None
    skipped: bool = False


class EmbeddingClient:
    """Turns texts into embeddings through a remote :class:`EmbeddingService`.

    Texts are cleaned first, then sent in fixed-size batches, one batch at a
    time. When a batch call fails, each text in that batch is retried alone
    and texts that still fail are marked as skipped.
    """

    def __init__(
        self,
        service: EmbeddingService,
        batch_size: int = EMBEDDING_BATCH_SIZE,
        batch_delay: float = EMBEDDING_BATCH_DELAY_SECONDS,
    ) -> None:
        self.service = service
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    def embed(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed a list of texts.

        Args:
            texts: Raw or cleaned texts

        Returns:
            list[EmbeddingResult]: One result per text that survived cleaning,
                in input order.

        Raises:
            NoValidInputError: If every text cleans to an empty string
        """
        cleaned_texts = [cleaned for cleaned in (clean_text(text) for text in texts) if cleaned]
        if not cleaned_texts:
            raise NoValidInputError()

        logger.debug(f"Sending {len(cleaned_texts)} cleaned chunks to embedding API")

        batch_count = (len(cleaned_texts) + self.batch_size - 1) // self.batch_size
        results: list[EmbeddingResult] = []

        for batch_number, start in enumerate(range(0, len(cleaned_texts), self.batch_size), 1):
            batch = cleaned_texts[start:start + self.batch_size]
            logger.debug(f"Processing batch {batch_number}/{batch_count} ({len(batch)} texts)")

            results.extend(self._embed_batch(batch, start))

            if start + self.batch_size < len(cleaned_texts):
                time.sleep(self.batch_delay)

        embedded = sum(1 for result in results if not result.skipped)
        logger.info(f"✅ Created {embedded} embeddings from {len(cleaned_texts)} texts")
        return results

    def embed_query(self, text: str) -> list[float]:
        """Embed a single text without batching.

        Args:
            text: Cleaned question text

        Returns:
            list[float]: The embedding vector

        Raises:
            EmbeddingServiceError: If the embedding call fails
        """
        try:
            return self.service.embed_one(text)
        except Exception as e:
            logger.error(f"❌ Failed to embed query: {e}")
            raise EmbeddingServiceError(str(e), provider_name="gemini") from e

    def _embed_batch(self, batch: list[str], start: int) -> list[EmbeddingResult]:
        try:
            vectors = self.service.embed_batch(batch)
            if not vectors or len(vectors) != len(batch):
                raise ValueError(f"expected {len(batch)} embeddings, got {len(vectors or [])}")
            return [EmbeddingResult(text=text, vector=vector) for text, vector in zip(batch, vectors)]
        except Exception as e:
            logger.warning(f"⚠️ Failed to process batch starting at index {start}: {e}")
            return [self._embed_single(text) for text in batch]

    def _embed_single(self, text: str) -> EmbeddingResult:
        try:
            return EmbeddingResult(text=text, vector=self.service.embed_one(text))
        except Exception as e:
            logger.error(
                f"❌ Failed to embed individual text: '{text[:CONTENT_PREVIEW_LENGTH]}...': {e}"
            )
            return EmbeddingResult(text=text, skipped=True)
