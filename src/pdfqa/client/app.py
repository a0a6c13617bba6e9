"""Flask web application serving the session-scoped PDF Q&A API.

This module wires the session pipeline into the route blueprints and
exposes the upload, ask and session management endpoints.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from pdfqa.client.routes import (
    ask_bp,
    health_bp,
    init_config,
    session_bp,
    upload_bp,
)
from pdfqa.constants import DEFAULT_SERVER_API_KEY, DEFAULT_UPLOAD_FOLDER, MAX_UPLOAD_SIZE_BYTES
from pdfqa.service.pipeline import create_pipeline

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

# Configure upload settings
UPLOAD_FOLDER = Path(os.getenv("UPLOAD_FOLDER", DEFAULT_UPLOAD_FOLDER))
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE_BYTES

# Register blueprints
app.register_blueprint(health_bp)
app.register_blueprint(upload_bp)
app.register_blueprint(ask_bp)
app.register_blueprint(session_bp)


def initialize_services():
    """Build the session pipeline and route configuration on startup."""
    logger.info("🔧 Initializing services...")

    UPLOAD_FOLDER.mkdir(parents=True, exist_ok=True)

    pipeline = create_pipeline()
    logger.info("✅ Session pipeline initialized successfully")

    api_key = os.getenv("SERVER_API_KEY", DEFAULT_SERVER_API_KEY)
    if api_key == DEFAULT_SERVER_API_KEY:
        logger.warning("⚠️ SERVER_API_KEY not set, using the development token")

    init_config(pipeline=pipeline, api_key=api_key, upload_folder=UPLOAD_FOLDER)


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting PDF Q&A server...")

    print("📦 Initializing services...")
    initialize_services()
    print("✅ Services initialized successfully")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "4000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
