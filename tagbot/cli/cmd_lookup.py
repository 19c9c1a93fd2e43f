"""Terminal issue/PR lookup: runs the same pipeline the bot uses."""

import asyncio
import click

from . import cli
from .shared import console


def parse_target(parts: tuple[str, ...]) -> tuple[str, str, str]:
    """Accept ``owner/repo#12``, ``owner/repo 12`` or ``owner repo 12``."""
    if len(parts) == 1 and "#" in parts[0]:
        repo_part, _, number = parts[0].partition("#")
        owner, _, repository = repo_part.partition("/")
        return owner, repository, number
    if len(parts) == 2:
        owner, _, repository = parts[0].partition("/")
        return owner, repository, parts[1]
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    raise click.UsageError("expected owner/repo#number, owner/repo number, or owner repo number")


def print_message(message):
    """Print a RenderedMessage as a rich panel."""
    from rich.panel import Panel
    from rich.text import Text
    from tagbot.communication.transport import format_timestamp

    body = Text()
    body.append(message.author.name, style="bold")
    body.append(f"\n{message.url}\n", style="dim")
    for field in message.fields:
        body.append(f"\n{field.name}\n", style="bold cyan")
        body.append(f"{field.value}\n")
    footer = message.footer.text
    timestamp = format_timestamp(message.timestamp)
    if timestamp:
        footer = f"{footer} • {timestamp}"

    console.print(Panel(
        body,
        title=Text(message.title),
        subtitle=Text(footer),
        border_style=f"#{message.color:06x}",
    ))


@cli.command()
@click.argument("target", nargs=-1, required=True)
@click.option("--locale", default=None, help="Locale for headings and phrases")
def lookup(target, locale):
    """Look up a GitHub issue or pull request."""
    from tagbot.commands.issue_pr import render_lookup
    from tagbot.config import load_settings
    from tagbot.errors import NotFoundError, TagbotError
    from tagbot.github.client import GitHubClient
    from tagbot.i18n import t

    settings = load_settings()
    owner, repository, number = parse_target(target)
    locale = locale or settings.default_locale
    client = GitHubClient(
        settings.github_token,
        api_url=settings.github_api_url,
        timeout=settings.github_timeout,
    )

    try:
        message = asyncio.run(render_lookup(
            client, owner, repository, number,
            locale=locale,
            install_command=settings.install_command,
        ))
    except NotFoundError:
        console.print("[yellow]Nothing found.[/yellow]")
        return
    except TagbotError as e:
        console.print(f"[red]{t(e.key, locale, **e.params)}[/red]")
        raise SystemExit(1)

    print_message(message)
