"""Upload API route for document ingestion."""

import logging
import uuid
from pathlib import Path

from flask import Blueprint, jsonify, request
from werkzeug.utils import secure_filename

from pdfqa.client.helpers import allowed_file
from pdfqa.client.routes.auth import handle_pipeline_errors, require_api_key
from pdfqa.client.routes.config import get_config
from pdfqa.errors import MissingInputError

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


def save_upload(file, folder: Path) -> Path:
    """Save an uploaded file under a unique temporary name.

    Args:
        file: Werkzeug FileStorage from the request
        folder: Upload folder

    Returns:
        Path: Location of the saved file
    """
    folder.mkdir(parents=True, exist_ok=True)
    filepath = folder / f"{uuid.uuid4().hex}_{secure_filename(file.filename)}"
    file.save(filepath)
    logger.info(f"💾 Saved file: {filepath}")
    return filepath


@upload_bp.route("/api/upload", methods=["POST"])
@require_api_key
@handle_pipeline_errors
def upload_document():
    """Ingest one PDF into a session, replacing any previous document.

    Expects multipart form data with:
        - file: The PDF file
        - sessionId: Session that will own the document

    Response:
        {"ok": true, "uploaded_chunks": 12, "session_id": "abc"}
    """
    logger.info("📤 Received document upload request")
    config = get_config()

    file = request.files.get("file")
    if file is None or not file.filename:
        raise MissingInputError("No file uploaded")

    session_id = request.form.get("sessionId")
    if not session_id:
        raise MissingInputError("Missing session ID")

    if not allowed_file(file.filename, config.allowed_extensions):
        return jsonify({"error": "File type not allowed. Only PDF files are accepted."}), 400

    filepath = save_upload(file, config.upload_folder)
    try:
        result = config.pipeline.ingest(filepath.read_bytes(), file.filename, session_id)
    finally:
        filepath.unlink(missing_ok=True)

    return jsonify(
        {"ok": True, "uploaded_chunks": result.uploaded_chunks, "session_id": result.session_id}
    )
