"""Database management commands."""

import asyncio
import os

from . import cli
from .shared import console


@cli.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
def db_init():
    """Initialize database schema."""
    async def _init():
        from tagbot.config import load_settings
        from tagbot.db.connection import init_db, close_db

        settings = load_settings()
        pool = await init_db(settings.database_url)

        schema_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "db", "schema.sql")
        with open(schema_path) as f:
            schema = f.read()

        try:
            async with pool.acquire() as conn:
                await conn.execute(schema)
        finally:
            await close_db()

        console.print("[green]✓ Database schema initialized[/green]")

    asyncio.run(_init())
