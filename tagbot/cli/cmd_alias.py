"""Repository alias management commands."""

import asyncio
import click

from . import cli
from .shared import console


def _with_db(coro_fn):
    """Run a coroutine function with the database pool open."""
    async def _run():
        from tagbot.config import load_settings
        from tagbot.db.connection import init_db, close_db

        settings = load_settings()
        await init_db(settings.database_url)
        try:
            return await coro_fn()
        finally:
            await close_db()

    return asyncio.run(_run())


@cli.group()
def alias():
    """Manage repository aliases (alias → owner/repository) per community."""
    pass


@alias.command("list")
@click.argument("community_id")
def alias_list(community_id):
    """List repository aliases of a community (Telegram chat id)."""
    from rich.table import Table
    from tagbot.db.models import get_repository_aliases

    aliases = _with_db(lambda: get_repository_aliases(community_id))
    if not aliases:
        console.print(f"[dim]No aliases for {community_id}[/dim]")
        return

    table = Table(title=f"Aliases for {community_id}")
    table.add_column("Alias", style="bold")
    table.add_column("Repository")
    for name, entry in sorted(aliases.items()):
        table.add_row(name, f"{entry.owner}/{entry.repository}")
    console.print(table)


@alias.command("add")
@click.argument("community_id")
@click.argument("name")
@click.argument("repository")
def alias_add(community_id, name, repository):
    """Add or replace an alias. REPOSITORY is owner/name."""
    from tagbot.db.models import set_repository_alias
    from tagbot.github.client import validate_github_name

    owner, _, repo = repository.partition("/")
    if not validate_github_name(owner) or not validate_github_name(repo):
        raise click.BadParameter("expected owner/repository", param_hint="REPOSITORY")
    if ":" in name or not name.strip():
        raise click.BadParameter("alias may not be empty or contain ':'", param_hint="NAME")

    _with_db(lambda: set_repository_alias(community_id, name, owner, repo))
    console.print(f"[green]✓ {name} → {owner}/{repo}[/green]")


@alias.command("remove")
@click.argument("community_id")
@click.argument("name")
def alias_remove(community_id, name):
    """Remove an alias."""
    from tagbot.db.models import remove_repository_alias

    removed = _with_db(lambda: remove_repository_alias(community_id, name))
    if removed:
        console.print(f"[green]✓ Removed {name}[/green]")
    else:
        console.print(f"[yellow]No alias named {name}[/yellow]")
