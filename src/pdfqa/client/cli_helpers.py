"""Helper functions for CLI commands."""

import click

from pdfqa.service.database import RavenDBConfig, create_database, database_exists


def ensure_database_exists(create_if_missing: bool = False) -> bool:
    """Make sure the vector database is reachable before a command runs.

    Args:
        create_if_missing: Create the database when it is absent

    Returns:
        True once the database exists

    Raises:
        click.Abort: If the database is absent and was not created
    """
    if database_exists():
        return True

    db_name = RavenDBConfig.get_database_name()
    if not create_if_missing:
        click.echo(f"✗ Error: Database '{db_name}' does not exist!", err=True)
        click.echo("\nRe-run an upload with --create-database to create it.", err=True)
        raise click.Abort()

    click.echo(f"Creating database '{db_name}' at {RavenDBConfig.get_url()}...")
    try:
        create_database()
    except Exception as e:
        click.echo(f"✗ Failed to create database: {e}", err=True)
        raise click.Abort()

    click.echo("✓ Database created successfully!")
    return True


def format_source(index: int, source: dict) -> str:
    """Format one answer source as a numbered line."""
    return f"  {index}. {source.get('source')} - chunk #{source.get('chunk_index')}"
