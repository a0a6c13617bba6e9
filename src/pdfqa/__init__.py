"""PDF question answering with session-scoped retrieval-augmented generation."""

__version__ = "0.1.0"
