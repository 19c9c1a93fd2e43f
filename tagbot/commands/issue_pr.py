"""/issue: look up a GitHub issue or pull request and post its status.

Usage: /issue <owner> <repository> <number>
       /issue <alias> <number>

Aliases are configured per community (``alias:owner/repository``).
"""

import logging
from typing import Awaitable, Callable, Optional

from ..db.models import get_repository_aliases
from ..errors import ConfigurationError, NotFoundError, ValidationError
from ..github.classifier import classify
from ..github.client import GitHubClient, validate_coordinate
from ..github.render import RenderedMessage, build_message
from .args import ArgumentSpec, Match
from .base import CommandContext, CommandResult
from .command import Command

logger = logging.getLogger("tagbot.commands.issue_pr")

# (chat_id, message) → delivered
Transport = Callable[[int, RenderedMessage], Awaitable[None]]


async def render_lookup(
    client: GitHubClient,
    owner: str,
    repository: str,
    number: str,
    locale: str = "en",
    install_command: str = "npm i",
) -> RenderedMessage:
    """Fetch, classify and render one entity as a single unit.

    Raises:
        ConfigurationError / ValidationError: before any request
        NotFoundError: the issue or pull request does not exist
    """
    entity = await client.fetch_issue_or_pr(owner, repository, number)
    if entity is None:
        raise NotFoundError("command.issue-pr.not_found")
    classification = classify(entity)
    logger.debug(
        f"{owner}/{repository}#{entity.number}: {entity.kind.value} {classification.status.value}"
    )
    return build_message(entity, classification, locale=locale, install_command=install_command)


class IssuePRCommand(Command):
    name = "issue"
    aliases = ("pr",)
    description = "Look up a GitHub issue or pull request"

    specs = (
        ArgumentSpec("first", Match.PHRASE),
        ArgumentSpec("second", Match.PHRASE),
        ArgumentSpec("third", Match.PHRASE),
    )

    def __init__(self, client: GitHubClient, send: Transport, install_command: str = "npm i"):
        self.client = client
        self.send = send
        self.install_command = install_command

    async def resolve_coordinate(self, ctx: CommandContext, args: dict) -> tuple[str, str, str]:
        """Turn ``owner repo number`` or ``alias number`` into a coordinate."""
        first: Optional[str] = args.get("first")
        second: Optional[str] = args.get("second")
        third: Optional[str] = args.get("third")

        if not first:
            raise ValidationError("command.issue-pr.usage")

        if third:
            owner, repository, number = first, second, third
        else:
            aliases = await get_repository_aliases(ctx.community_id)
            entry = aliases.get(first)
            if entry is None:
                if second:
                    raise ValidationError("command.issue-pr.unknown_alias", alias=first)
                raise ValidationError("command.issue-pr.usage")
            owner, repository, number = entry.owner, entry.repository, second

        if not owner or not repository or not number:
            raise ValidationError("command.issue-pr.usage")
        return owner, repository, number

    async def execute(self, ctx: CommandContext, args: dict) -> CommandResult:
        if not self.client.configured:
            raise ConfigurationError("command.issue-pr.no_token")

        owner, repository, number = await self.resolve_coordinate(ctx, args)
        validate_coordinate(owner, repository, number)

        try:
            message = await render_lookup(
                self.client,
                owner,
                repository,
                number,
                locale=ctx.locale,
                install_command=self.install_command,
            )
            await self.send(ctx.chat_id, message)
        except NotFoundError:
            logger.debug(f"Nothing found for {owner}/{repository}#{number}")
        except (ValidationError, ConfigurationError):
            raise
        except Exception as e:
            logger.error(f"Lookup failed for {owner}/{repository}#{number}: {e}", exc_info=True)
        return CommandResult()
