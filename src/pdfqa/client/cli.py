"""Command-line interface for pdfqa using Click."""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from dotenv import load_dotenv

from pdfqa.client.cli_helpers import ensure_database_exists, format_source
from pdfqa.constants import DEFAULT_TOP_K
from pdfqa.errors import PdfQAError
from pdfqa.service.database import RavenDBConfig, count_documents
from pdfqa.service.pipeline import SessionPipeline, create_pipeline

# Load environment variables
load_dotenv()


@contextmanager
def session_pipeline() -> Iterator[SessionPipeline]:
    """Yield a pipeline for one command and close its RavenDB connection after."""
    pipeline = create_pipeline()
    try:
        yield pipeline
    finally:
        pipeline.close()


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option("--session-id", required=True, help="Session that will own the document")
@click.option(
    "--create-database",
    "create_database_flag",
    is_flag=True,
    default=False,
    help="Create the RavenDB database if it doesn't exist",
)
def upload(file: Path, session_id: str, create_database_flag: bool) -> None:
    """Upload the PDF FILE into a session, replacing its previous document.

    Example:
        pdfqa-upload paper.pdf --session-id abc
        pdfqa-upload paper.pdf --session-id abc --create-database
    """
    ensure_database_exists(create_if_missing=create_database_flag)

    click.echo(f"📄 Uploading {file.name} to session '{session_id}'...")
    try:
        with session_pipeline() as pipeline:
            result = pipeline.ingest(file.read_bytes(), file.name, session_id)
    except PdfQAError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if result.warning:
        click.echo(f"⚠️  {result.warning}", err=True)
    click.echo(f"✓ Upload complete! Stored {result.uploaded_chunks} chunks.")


@click.command()
@click.argument("question", type=str)
@click.option("--session-id", required=True, help="Session to ask about")
@click.option(
    "--top-k",
    type=click.IntRange(min=1),
    default=DEFAULT_TOP_K,
    help=f"Number of chunks used as context (default: {DEFAULT_TOP_K})",
)
def ask(question: str, session_id: str, top_k: int) -> None:
    """Ask QUESTION about the document uploaded to a session.

    Example:
        pdfqa-ask "What is the main result?" --session-id abc
    """
    try:
        with session_pipeline() as pipeline:
            result = asyncio.run(pipeline.ask(question, session_id, top_k))
    except PdfQAError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    click.echo(result.answer)
    if result.sources:
        click.echo("\nSources:")
        for i, source in enumerate(result.sources, 1):
            click.echo(format_source(i, source))


@click.command()
@click.argument("session_id", type=str)
def clear(session_id: str) -> None:
    """Delete every vector stored for SESSION_ID.

    Example:
        pdfqa-clear abc
    """
    with session_pipeline() as pipeline:
        result = pipeline.clear_session(session_id)

    if not result.ok:
        click.echo(f"⚠️  {result.warning}", err=True)
    click.echo(f"🗑️  Session {session_id} cleared ({result.deleted} vectors deleted)")


@click.command()
@click.argument("session_id", type=str)
def session(session_id: str) -> None:
    """Show which document SESSION_ID holds.

    Example:
        pdfqa-session abc
    """
    try:
        with session_pipeline() as pipeline:
            info = pipeline.get_session_info(session_id)
    except PdfQAError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if not info.exists:
        click.echo(f"Session '{session_id}' has no document.")
        return
    click.echo(f"📄 Session '{session_id}': {info.document} (uploaded {info.uploaded_at})")


@click.command()
def count() -> None:
    """Show the number of vector records across all sessions.

    Example:
        pdfqa-count
    """
    ensure_database_exists()
    try:
        doc_count = count_documents()
    except Exception as e:
        click.echo(f"✗ Error counting records in {RavenDBConfig.get_database_name()}: {e}", err=True)
        raise click.Abort()

    click.echo(f"📊 Database contains {doc_count} vector record(s)")
