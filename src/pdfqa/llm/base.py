"""Protocols for the remote embedding and generation services."""

from typing import Protocol


class EmbeddingService(Protocol):
    """Protocol for a remote embedding service.

    Implementations return vectors of a fixed dimension in the same order as
    the input texts. Any failure is raised; the caller decides how to recover.
    """

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts with a single remote call.

        Args:
            texts: Cleaned, non-empty texts

        Returns:
            list[list[float]]: Up to one vector per input, in input order.
                An empty or short list signals a partial response.
        """
        ...

    def embed_one(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Cleaned, non-empty text

        Returns:
            list[float]: The embedding vector
        """
        ...


class GenerationService(Protocol):
    """Protocol for a remote text generation service."""

    async def generate_response(self, prompt: str) -> str:
        """Generate an answer for one combined prompt.

        Args:
            prompt: Instruction preamble, context and question in one string

        Returns:
            str: The generated answer text
        """
        ...
