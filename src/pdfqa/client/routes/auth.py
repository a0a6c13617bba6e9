"""Shared-secret authentication and error mapping for API routes."""

import functools
import logging
from typing import Any, Callable, TypeVar

from flask import jsonify, request

from pdfqa.client.routes.config import get_config
from pdfqa.errors import is_user_error

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def extract_token(header_value: str) -> str:
    """Strip an optional 'Bearer ' prefix from an auth header value."""
    if header_value.startswith("Bearer "):
        return header_value.split(" ", 1)[1]
    return header_value


def require_api_key(func: F) -> F:
    """Reject requests that do not carry the shared API key.

    The key is read from the ``x-api-key`` header, or from ``Authorization``
    with or without a ``Bearer`` prefix. Missing keys get 401, wrong keys 403.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("x-api-key") or request.headers.get("Authorization")
        if not key:
            return jsonify({"error": "Missing API key"}), 401
        if extract_token(key) != get_config().api_key:
            logger.warning(f"❌ Invalid API key on {request.path}")
            return jsonify({"error": "Invalid API key"}), 403
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def handle_pipeline_errors(func: F) -> F:
    """Map pipeline exceptions to JSON error responses.

    Input errors become 400; everything else becomes 500 with the
    underlying message.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if is_user_error(e):
                logger.warning(f"❌ Rejected request on {request.path}: {e}")
                return jsonify({"error": str(e)}), 400
            logger.error(f"❌ Error in {request.path}: {e}", exc_info=True)
            return jsonify({"error": str(e) or "An internal server error occurred."}), 500

    return wrapper  # type: ignore
