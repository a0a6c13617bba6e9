"""Google Gemini service implementation."""

import logging

from google import genai

from pdfqa.constants import CONTENT_PREVIEW_LENGTH, get_embedding_dimensions, get_embedding_model

logger = logging.getLogger(__name__)


class GeminiService:
    """Google Gemini embedding and generation service.

    The API key is retrieved by the client from the GEMINI_API_KEY (or
    GOOGLE_API_KEY) environment variable. One instance is built at startup
    and shared by reference, so tests can swap in a fake.
    """

    def __init__(
        self,
        model: str,
        embedding_model: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        """Initialize the Gemini service.

        Args:
            model: The generation model name (e.g., "gemini-2.5-flash")
            embedding_model: Embedding model name. If None, uses EMBEDDING_MODEL
                env var or "text-embedding-004".
            dimensions: Output vector dimension. If None, uses EMBEDDING_DIMENSIONS
                env var or 768.
        """
        self.model = model
        self.embedding_model = embedding_model or get_embedding_model()
        self.dimensions = dimensions or get_embedding_dimensions()
        logger.info(
            f"🤖 Initializing GeminiService: model={model}, "
            f"embedding_model={self.embedding_model}, dimensions={self.dimensions}"
        )
        self.client = genai.Client()

    def _embed_content(self, contents: list[str]):
        return self.client.models.embed_content(
            model=self.embedding_model,
            contents=contents,
            config=genai.types.EmbedContentConfig(output_dimensionality=self.dimensions),
        )

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts with one batch request.

        Args:
            texts: List of text strings to embed

        Returns:
            list[list[float]]: Embedding vectors in input order; empty when the
                response carries no embeddings.
        """
        response = self._embed_content(texts)
        embeddings = response.embeddings or []
        return [embedding.values for embedding in embeddings]

    def embed_one(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: The text to embed

        Returns:
            list[float]: The embedding vector
        """
        response = self._embed_content([text])
        return response.embeddings[0].values

    async def generate_response(self, prompt: str) -> str:
        """Generate an answer using Gemini.

        Args:
            prompt: The combined prompt

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Prompt ({len(prompt)} chars): {prompt[:CONTENT_PREVIEW_LENGTH]}...")

        try:
            response = self.client.models.generate_content(model=self.model, contents=prompt)
            content = response.text or ""
            logger.info(f"✅ Response generated: {len(content)} characters")
            return content
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise
