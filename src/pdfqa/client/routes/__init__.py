"""Flask route blueprints for the pdfqa server."""

from pdfqa.client.routes.ask import ask_bp
from pdfqa.client.routes.config import get_config, init_config
from pdfqa.client.routes.health import health_bp
from pdfqa.client.routes.session import session_bp
from pdfqa.client.routes.upload import upload_bp

__all__ = [
    "ask_bp",
    "health_bp",
    "session_bp",
    "upload_bp",
    "init_config",
    "get_config",
]
