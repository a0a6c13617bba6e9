"""Session management API routes."""

import logging

from flask import Blueprint, jsonify, request

from pdfqa.client.routes.auth import handle_pipeline_errors, require_api_key
from pdfqa.client.routes.config import get_config

logger = logging.getLogger(__name__)

session_bp = Blueprint("session", __name__)


@session_bp.route("/api/clear-session", methods=["POST"])
@require_api_key
@handle_pipeline_errors
def clear_session():
    """Delete every vector of a session.

    Request:
        {"sessionId": "abc"}

    Response:
        {"ok": true, "message": "Session abc cleared successfully", "deleted": 12}
    """
    data = request.get_json(silent=True) or {}
    session_id = data.get("sessionId")

    result = get_config().pipeline.clear_session(session_id)
    if not result.ok:
        logger.warning(f"⚠️ Session {session_id} only partly cleared: {result.warning}")

    return jsonify(
        {
            "ok": True,
            "message": f"Session {session_id} cleared successfully",
            "deleted": result.deleted,
        }
    )


@session_bp.route("/api/session/<session_id>", methods=["GET"])
@require_api_key
@handle_pipeline_errors
def get_session(session_id: str):
    """Report whether a session holds a document.

    Response:
        {"exists": true, "document": "paper.pdf", "uploaded_at": "...", "session_id": "abc"}
        {"exists": false, "session_id": "abc"}
    """
    info = get_config().pipeline.get_session_info(session_id)
    if not info.exists:
        return jsonify({"exists": False, "session_id": session_id})

    return jsonify(
        {
            "exists": True,
            "document": info.document,
            "uploaded_at": info.uploaded_at,
            "session_id": session_id,
        }
    )
