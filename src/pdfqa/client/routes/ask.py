"""Question answering API route."""

import logging

from flask import Blueprint, jsonify, request

from pdfqa.client.helpers import run_async
from pdfqa.client.routes.auth import handle_pipeline_errors, require_api_key
from pdfqa.client.routes.config import get_config
from pdfqa.constants import DEFAULT_TOP_K

logger = logging.getLogger(__name__)

ask_bp = Blueprint("ask", __name__)


@ask_bp.route("/api/ask", methods=["POST"])
@require_api_key
@handle_pipeline_errors
def ask():
    """Answer a question from the session's uploaded document.

    Request:
        {
            "question": "What is the main result?",
            "sessionId": "abc",
            "topK": 4  # Optional
        }

    Response:
        {
            "answer": "The main result is...",
            "sources": [
                {"source": "paper.pdf", "chunk_index": 0, "session_id": "abc"},
                ...
            ],
            "session_id": "abc"
        }
    """
    logger.info("📨 Received ask request")
    data = request.get_json(silent=True) or {}

    result = run_async(
        get_config().pipeline.ask(
            data.get("question"),
            data.get("sessionId"),
            data.get("topK", DEFAULT_TOP_K),
        )
    )

    logger.info(f"✅ Answered with {len(result.sources)} sources")
    return jsonify({"answer": result.answer, "sources": result.sources, "session_id": result.session_id})
