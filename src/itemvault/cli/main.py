"""ItemVault CLI — run the API server and prepare a database.

Usage:
    itemvault serve                 # Run the API with uvicorn
    itemvault serve --reload        # Auto-reload while developing
    itemvault init-db               # Create tables (dev/SQLite databases)

Production databases are migrated with Alembic instead of init-db:
    alembic upgrade head
"""

from __future__ import annotations

import asyncio
from typing import Optional

import click


@click.group()
def cli():
    """ItemVault — personal item records behind token auth."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: ITEMVAULT_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: ITEMVAULT_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    # Importing settings fails fast if the database URL or JWT secret is missing
    from itemvault.config import settings

    uvicorn.run(
        "itemvault.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables that do not exist yet."""
    from itemvault.db.engine import engine
    from itemvault.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho("Database tables created.", fg="green")


def main():
    cli()


if __name__ == "__main__":
    main()
