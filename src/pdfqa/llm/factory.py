"""Factory function for creating LLM service instances."""

import logging
import os

from dotenv import load_dotenv

from pdfqa.constants import DEFAULT_LLM_MODEL
from pdfqa.errors import ConfigurationError
from pdfqa.llm.gemini import GeminiService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_llm_service(config: dict | None = None) -> GeminiService:
    """Factory function to create an LLM service instance.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': Service type (default: from LLM_SERVICE env, or "gemini")
                - 'model': Generation model name (default: from LLM_MODEL env)
                - 'embedding_model': Embedding model name (default: from EMBEDDING_MODEL env)

    Returns:
        GeminiService: An instance implementing both the embedding and the
            generation protocols.

    Raises:
        ConfigurationError: If the service type is not supported
    """
    if config is None:
        config = {}

    service_type = config.get("service", os.getenv("LLM_SERVICE", "gemini"))

    if service_type == "gemini":
        model = config.get("model", os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL))
        return GeminiService(model=model, embedding_model=config.get("embedding_model"))

    raise ConfigurationError(f"Unsupported service type: {service_type}")
