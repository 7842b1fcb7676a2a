"""Chatroom CLI — run the server and manage local setup.

Usage:
    chatroom serve                    # Run the API with uvicorn
    chatroom init-db                  # Create tables (dev; use alembic in prod)
    chatroom gen-secret               # Print a fresh CHATROOM_JWT_SECRET
    chatroom hash-password            # Print a password digest (prompts)
"""

from __future__ import annotations

import asyncio
import secrets

import click

from chatroom.config import settings


@click.group()
def cli():
    """Chatroom backend management."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: CHATROOM_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: CHATROOM_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run(
        "chatroom.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables directly from the ORM models."""
    from chatroom.db.engine import engine
    from chatroom.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho("Tables created.", fg="green")


@cli.command("gen-secret")
@click.option("--bytes", "nbytes", default=32, show_default=True, type=int)
def gen_secret(nbytes: int):
    """Print a random token-signing secret."""
    if nbytes < 32:
        raise click.BadParameter("use at least 32 bytes", param_hint="--bytes")
    click.echo(secrets.token_urlsafe(nbytes))


@cli.command("hash-password")
@click.password_option()
def hash_password(password: str):
    """Print the stored digest for a password (salt:key, hex)."""
    from chatroom.auth.password import PasswordHasher

    hasher = PasswordHasher(iterations=settings.password_hash_iterations)
    click.echo(hasher.hash(password))


if __name__ == "__main__":
    cli()
