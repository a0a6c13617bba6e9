"""Exception hierarchy for pdfqa.

All application exceptions inherit from :class:`PdfQAError`, which carries
an optional ``provider_name`` naming the external service that failed
(e.g. "gemini", "ravendb").

    PdfQAError
    +-- MissingInputError       (no file, question or session id)
    +-- EmptyDocumentError      (PDF yielded no text)
    +-- NoContentError          (no chunk survived cleaning)
    +-- EmptyQuestionError      (question cleaned to nothing)
    +-- NoValidInputError       (nothing left to embed after cleaning)
    +-- EmbeddingServiceError   (embedding call failed)
    +-- VectorStoreError        (upsert or query failed)
    +-- GenerationServiceError  (answer synthesis failed)
    +-- ConfigurationError      (startup / missing config)

The first four are caused by the caller's input and map to HTTP 400.
"""


class PdfQAError(Exception):
    """Base exception for all pdfqa errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class MissingInputError(PdfQAError):
    """Raised when a required file, question or session id is absent."""

    def __init__(self, message: str = "Missing required input") -> None:
        super().__init__(message=message)


class EmptyDocumentError(PdfQAError):
    """Raised when text extraction returns nothing but whitespace."""

    def __init__(self, message: str = "PDF contains no readable text content.") -> None:
        super().__init__(message=message)


class NoContentError(PdfQAError):
    """Raised when every chunk of a document is rejected by cleaning."""

    def __init__(
        self,
        message: str = "PDF contains no processable text content after cleaning.",
    ) -> None:
        super().__init__(message=message)


class EmptyQuestionError(PdfQAError):
    """Raised when a question cleans down to an empty string."""

    def __init__(self, message: str = "Question contains no valid content") -> None:
        super().__init__(message=message)


# ---------------------------------------------------------------------------
# Remote service errors
# ---------------------------------------------------------------------------

class NoValidInputError(PdfQAError):
    """Raised when every text handed to the embedding client is dropped."""

    def __init__(self, message: str = "No valid text chunks after cleaning") -> None:
        super().__init__(message=message)


class EmbeddingServiceError(PdfQAError):
    """Raised when the embedding service fails and no fallback applies."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(PdfQAError):
    """Raised when the vector index rejects an upsert or a query."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationServiceError(PdfQAError):
    """Raised when answer generation fails."""

    def __init__(
        self,
        message: str = "Answer generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(PdfQAError):
    """Raised on invalid or missing configuration at startup."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message=message)


USER_ERRORS = (MissingInputError, EmptyDocumentError, NoContentError, EmptyQuestionError)


def is_user_error(exc: BaseException) -> bool:
    """Return True when the error was caused by the caller's input."""
    return isinstance(exc, USER_ERRORS)
