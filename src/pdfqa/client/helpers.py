"""Small helpers shared by the Flask routes and the CLI."""

import asyncio
from typing import Any

from pdfqa.constants import ALLOWED_EXTENSIONS


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a new event loop.

    This is useful for calling async functions from synchronous Flask routes.
    Creates a new event loop, runs the coroutine, and properly cleans up.

    Args:
        coro: An awaitable coroutine to execute

    Returns:
        The result of the coroutine

    Note:
        For CLI commands, prefer using asyncio.run() directly.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def allowed_file(filename: str, allowed_extensions: set[str] = ALLOWED_EXTENSIONS) -> bool:
    """Check if the file extension is allowed.

    Args:
        filename: The filename to check
        allowed_extensions: Lower-case extensions without the dot

    Returns:
        True if extension is allowed, False otherwise
    """
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed_extensions
