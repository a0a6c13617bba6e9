"""Shared configuration for route modules."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pdfqa.constants import ALLOWED_EXTENSIONS, DEFAULT_SERVER_API_KEY


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    Holds the session pipeline built at startup so routes never construct
    remote clients themselves.
    """

    pipeline: Any = None
    api_key: str = DEFAULT_SERVER_API_KEY
    upload_folder: Path | None = None
    allowed_extensions: set[str] = field(default_factory=lambda: set(ALLOWED_EXTENSIONS))


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    pipeline: Any = None,
    api_key: str | None = None,
    upload_folder: Path | None = None,
) -> None:
    """Initialize the shared route configuration.

    Args:
        pipeline: SessionPipeline instance
        api_key: Shared secret expected on every API request
        upload_folder: Path to the temporary upload folder
    """
    if pipeline is not None:
        _config.pipeline = pipeline
    if api_key is not None:
        _config.api_key = api_key
    if upload_folder is not None:
        _config.upload_folder = upload_folder
