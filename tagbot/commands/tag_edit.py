"""/tagedit: edit a tag's content and, for moderators, its flags.

Usage: /tagedit <tag> [--hoist/--unhoist/--pin/--unpin] [--template/--untemplate] <content>

Examples:
  /tagedit Test Some new content
  /tagedit "Test 1" Some more new content
  /tagedit Test --hoist
  /tagedit "Test 1" --unpin
"""

import logging
from typing import Optional

from ..db.models import apply_mutation, get_community_settings, get_tag
from ..db.records import TagRecord
from ..errors import AuthorizationError
from ..i18n import t
from .args import ArgumentSpec, ConditionalSpec, Match, Prompt
from .base import CommandContext, CommandResult
from .command import Command
from .mutation import build_mutation
from .permissions import PermissionTier, RoleSettings, check_restricted, compute_tier

logger = logging.getLogger("tagbot.commands.tag_edit")


async def resolve_tag(text: str, ctx: CommandContext) -> Optional[TagRecord]:
    """Type resolver: tag name or alias → TagRecord."""
    return await get_tag(ctx.community_id, text.strip())


async def resolve_tag_content(text: str, ctx: CommandContext) -> Optional[str]:
    """Type resolver: free-text tag content. Blank content is rejected."""
    content = text.strip()
    return content or None


def _flags_given(collected: dict) -> bool:
    return bool(collected.get("hoist") or collected.get("unhoist"))


class TagEditCommand(Command):
    name = "tagedit"
    aliases = ("tag_edit",)
    description = "Edit a tag"

    specs = (
        ArgumentSpec(
            "tag",
            Match.PHRASE,
            type="tag",
            prompt=Prompt(
                start=lambda ctx: t("command.tags.edit.prompt.start", ctx.locale, user=ctx.mention),
                retry=lambda ctx, value: t(
                    "command.tags.edit.prompt.retry", ctx.locale, user=ctx.mention, name=value,
                ),
            ),
        ),
        ArgumentSpec("hoist", Match.FLAG, flags=("--hoist", "--pin")),
        ArgumentSpec("unhoist", Match.FLAG, flags=("--unhoist", "--unpin")),
        ArgumentSpec("templated", Match.FLAG, flags=("--template",)),
        ArgumentSpec("untemplated", Match.FLAG, flags=("--untemplate",)),
        # Content is optional once a hoist flag was given; otherwise ask for it.
        ConditionalSpec(
            condition=_flags_given,
            when_true=ArgumentSpec("content", Match.REST, type="tagContent"),
            when_false=ArgumentSpec(
                "content",
                Match.REST,
                type="tagContent",
                prompt=Prompt(
                    start=lambda ctx: t("command.tags.edit.prompt_content.start", ctx.locale, user=ctx.mention),
                    retry=lambda ctx, value: t(
                        "command.tags.edit.prompt_content.retry", ctx.locale, user=ctx.mention,
                    ),
                ),
            ),
        ),
    )

    resolvers = {
        "tag": resolve_tag,
        "tagContent": resolve_tag_content,
    }

    async def _role_settings(self, ctx: CommandContext) -> RoleSettings:
        return RoleSettings.from_settings(await get_community_settings(ctx.community_id))

    async def check_permissions(self, ctx: CommandContext) -> None:
        allowed, _ = check_restricted(ctx.roles, await self._role_settings(ctx))
        if not allowed:
            raise AuthorizationError("common.restricted")

    async def execute(self, ctx: CommandContext, args: dict) -> CommandResult:
        tag: TagRecord = args["tag"]
        tier = compute_tier(ctx.roles, await self._role_settings(ctx))

        request = build_mutation(args, tier, tag, ctx.actor_id)
        saved = await apply_mutation(request)
        if not saved:
            logger.warning(f"Tag {tag.id} ({tag.name!r}) was not updated; row missing?")
            return CommandResult(t("command.tags.edit.failed", ctx.locale))

        logger.info(
            f"Tag {tag.name!r} edited by {ctx.actor_id} "
            f"({request.kind.value}, hoisted={request.hoisted}, templated={request.templated})"
        )
        if tier is PermissionTier.ELEVATED and args.get("hoist"):
            return CommandResult(t("command.tags.edit.reply_hoisted", ctx.locale, name=tag.name))
        return CommandResult(t("command.tags.edit.reply", ctx.locale, name=tag.name))
