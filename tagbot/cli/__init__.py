"""tagbot CLI — command line interface."""

import click
from tagbot import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tagbot")
@click.pass_context
def cli(ctx):
    """tagbot — community tags and GitHub lookups for Telegram"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands grouped by category."""
    console.print(f"[bold]tagbot v{__version__}[/bold]\n")

    groups = {
        "Usage": [
            ("start", "Start the Telegram bot"),
            ("lookup", "Look up a GitHub issue or PR in the terminal"),
        ],
        "Data": [
            ("db init", "Initialize database schema"),
            ("alias list", "List a community's repository aliases"),
            ("alias add", "Add or replace a repository alias"),
            ("alias remove", "Remove a repository alias"),
        ],
    }

    for category, commands in groups.items():
        console.print(f"  [bold cyan]{category}[/bold cyan]")
        for name, desc in commands:
            console.print(f"    [bold]tagbot {name:14s}[/bold] {desc}")
        console.print()

    console.print("[dim]Run 'tagbot <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_db  # noqa: E402, F401
from . import cmd_alias  # noqa: E402, F401
from . import cmd_lookup  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()
