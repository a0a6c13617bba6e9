"""Banner and health check routes."""

from flask import Blueprint, jsonify

from pdfqa.client.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/", methods=["GET"])
def index():
    """Plain-text banner confirming the server is up."""
    return "PDF Q&A server with session management is running."


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    return jsonify(
        {
            "status": "healthy",
            "pipeline": "initialized" if get_config().pipeline else "not initialized",
        }
    )
