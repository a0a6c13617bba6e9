"""PDF text extraction, cleaning and chunking."""

import logging
import re

import fitz  # PyMuPDF

from pdfqa.constants import (
    CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    MAX_TEXT_LENGTH,
    MIN_TEXT_LENGTH,
)

logger = logging.getLogger(__name__)

# Mojibake left behind when UTF-8 math symbols are decoded as Windows-1252.
# Order matters: these run before the symbol blocks below are blanked out.
SYMBOL_REPLACEMENTS = [
    ("Â°", " degrees "),  # °
    ("âˆ ", "angle "),  # ∠
    ("âˆ†", "triangle "),  # ∆
    ("Ï€", "pi "),  # π
    ("âˆš", "sqrt "),  # √
]

# Control characters, general punctuation, super/subscripts, currency
# symbols and letterlike symbols.
_NOISE_PATTERN = re.compile(
    "[\u0000-\u001f\u007f-\u009f\u2000-\u206f\u2070-\u209f\u20a0-\u20cf\u2100-\u214f]"
)
_WHITESPACE_PATTERN = re.compile(r"\s+")


def extract_text_from_pdf(data: bytes) -> str:
    """Extract all text from an in-memory PDF.

    Args:
        data: Raw PDF bytes

    Returns:
        str: Concatenated text from all pages. Empty for image-only PDFs.
    """
    doc = fitz.open(stream=data, filetype="pdf")
    text = ""

    for page in doc:
        text += page.get_text()

    doc.close()
    return text


def clean_text(text: str) -> str:
    """Clean extracted text of encoding artifacts and symbol noise.

    Args:
        text: Raw text

    Returns:
        str: Cleaned text with single spaces, or "" when the result is shorter
            than 10 characters. Results longer than 8000 characters are cut.
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = text
    for broken, replacement in SYMBOL_REPLACEMENTS:
        cleaned = cleaned.replace(broken, replacement)

    cleaned = _NOISE_PATTERN.sub(" ", cleaned)
    cleaned = _WHITESPACE_PATTERN.sub(" ", cleaned).strip()

    if len(cleaned) < MIN_TEXT_LENGTH:
        return ""
    if len(cleaned) > MAX_TEXT_LENGTH:
        return cleaned[:MAX_TEXT_LENGTH]

    return cleaned


def chunk_text(text: str, max_len: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split text into overlapping fixed-size character windows.

    Window ``i`` starts at ``i * (max_len - 200)``. Each window is cleaned
    and windows that clean to nothing are dropped.

    Args:
        text: The text to chunk
        max_len: Raw window length in characters (default: 1000)

    Returns:
        list[str]: Cleaned chunks in document order
    """
    step = max_len - CHUNK_OVERLAP
    if step <= 0:
        raise ValueError(f"max_len must be greater than {CHUNK_OVERLAP}, got {max_len}")

    chunks = []
    for start in range(0, len(text), step):
        cleaned = clean_text(text[start:start + max_len])
        if cleaned:
            chunks.append(cleaned)

    logger.debug(f"Chunked {len(text)} characters into {len(chunks)} chunks")
    return chunks
