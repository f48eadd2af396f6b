"""Command-line interface for Latchkey.

This module provides the CLI commands for running and managing
the Latchkey service.
"""

import asyncio

import click

from latchkey import __version__
from latchkey.core.config import get_settings
from latchkey.core.durations import parse_duration_seconds
from latchkey.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="Latchkey")
def cli() -> None:
    """Latchkey - authentication and session service.

    Configuration is read from LATCHKEY_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the Latchkey server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)

    bind_host = host or settings.host
    bind_port = port or settings.port

    get_logger(__name__).info(
        "Starting Latchkey server",
        host=bind_host,
        port=bind_port,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "latchkey.infrastructure.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Allow running in production")
def init_db(force: bool) -> None:
    """Create all database tables."""
    from latchkey.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo("ERROR: Running in production mode. Pass --force to create tables.", err=True)
        raise SystemExit(1)

    async def initialize() -> None:
        db = get_db_manager(settings)
        try:
            await db.create_tables()
        finally:
            await db.disconnect()

    asyncio.run(initialize())
    click.echo("Database initialized successfully.")


@cli.command("prune-reset-tokens")
def prune_reset_tokens() -> None:
    """Delete expired entries from the database consumed reset token store."""
    from latchkey.infrastructure.auth import DatabaseConsumedTokenStore
    from latchkey.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    async def prune() -> int:
        db = get_db_manager(settings)
        try:
            return await DatabaseConsumedTokenStore(db.session_factory).prune_expired()
        finally:
            await db.disconnect()

    deleted = asyncio.run(prune())
    click.echo(f"Deleted {deleted} expired reset token record(s).")


@cli.command()
def info() -> None:
    """Display Latchkey configuration."""
    settings = get_settings()

    click.echo(f"""
Latchkey v{settings.app_version}
{'=' * 40}

Environment:       {settings.environment}
API Prefix:        {settings.api_prefix}
Database:          {settings.database_url}

Tokens:
  Access TTL:      {parse_duration_seconds(settings.jwt_access_expires_in)}s ({settings.jwt_access_expires_in})
  Refresh TTL:     {parse_duration_seconds(settings.jwt_refresh_expires_in)}s ({settings.jwt_refresh_expires_in})
  Reset TTL:       {parse_duration_seconds(settings.jwt_reset_expires_in)}s ({settings.jwt_reset_expires_in})
  Sessions:        {settings.session_registry}
  Consumed store:  {settings.consumed_token_store}

Mail:              {"configured" if settings.mail_configured else "not configured"}
""")


def main() -> None:
    """Entry point for the `latchkey` command and `python -m latchkey`."""
    cli()


if __name__ == "__main__":
    main()
