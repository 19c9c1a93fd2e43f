"""Command dispatcher: drives commands independent of the chat platform.

For every invocation:
  1. rate limit check
  2. command.check_permissions()      (restricted role, before any prompt)
  3. collector.start() / resume()     (prompts go out through ``reply``)
  4. command.execute()                (only with a complete argument set)

Errors are mapped here: validation and authorization errors become a
short reply, NotFoundError ends silently, anything else is logged and
answered with a generic message.
"""

import logging
from typing import Awaitable, Callable, Iterable, Optional

from ..errors import NotFoundError, TagbotError, classify_error, is_reportable
from ..i18n import t
from ..ratelimit import RateLimiter
from .args import ArgumentCollector, Step
from .base import CommandContext
from .command import Command
from .permissions import PermissionTier, RoleSettings, compute_tier
from .sessions import PendingInvocation, PromptSessions

logger = logging.getLogger("tagbot.commands.dispatcher")

# Sends markdown text back to the invoking chat
Reply = Callable[[str], Awaitable[None]]

# community id → community_settings row
SettingsLoader = Callable[[str], Awaitable[dict]]


class Dispatcher:
    def __init__(
        self,
        commands: Iterable[Command],
        sessions: Optional[PromptSessions] = None,
        rate_limiter: Optional[RateLimiter] = None,
        cancel_word: str = "cancel",
        load_settings: Optional[SettingsLoader] = None,
    ):
        self.commands: dict[str, Command] = {}
        for command in commands:
            for trigger in command.triggers:
                self.commands[trigger.lower()] = command
        self.sessions = sessions or PromptSessions()
        self.rate_limiter = rate_limiter
        self.cancel_word = cancel_word
        self.load_settings = load_settings

    def get(self, name: str) -> Optional[Command]:
        return self.commands.get((name or "").lower())

    async def invoke(self, name: str, ctx: CommandContext, raw: str, reply: Reply) -> bool:
        """Start a command invocation. Returns False for unknown commands."""
        command = self.get(name)
        if command is None:
            return False

        try:
            if self.rate_limiter is not None:
                exempt = await self._is_elevated(ctx)
                allowed, remaining = self.rate_limiter.check(ctx.actor_id, exempt=exempt)
                if not allowed:
                    await reply(t("common.rate_limited", ctx.locale, remaining=remaining))
                    return True

            # A new command replaces anything still waiting for this actor
            stale = self.sessions.close(ctx.chat_id, ctx.actor_id)
            if stale:
                stale.collector.abandon()

            await command.check_permissions(ctx)
            collector = command.collector(ctx, cancel_word=self.cancel_word)
            step = await collector.start(raw)
            await self._continue(command, ctx, collector, step, reply)
        except Exception as e:
            self.sessions.close(ctx.chat_id, ctx.actor_id)
            await self._report(e, command, ctx, reply)
        return True

    async def handle_reply(self, ctx: CommandContext, text: str, reply: Reply) -> bool:
        """Feed a plain message to a pending prompt.

        Returns:
            True if the message belonged to a pending invocation.
        """
        pending, expired = self.sessions.get(ctx.chat_id, ctx.actor_id)
        if expired:
            await reply(t("session.timeout", ctx.locale))
            return True
        if pending is None:
            return False

        if not self.sessions.record_attempt(pending):
            await reply(t("session.too_many_attempts", pending.ctx.locale))
            return True

        try:
            step = await pending.collector.resume(text)
            await self._continue(pending.command, pending.ctx, pending.collector, step, reply)
        except Exception as e:
            self.sessions.close(ctx.chat_id, ctx.actor_id)
            await self._report(e, pending.command, pending.ctx, reply)
        return True

    async def cancel(self, ctx: CommandContext, reply: Reply) -> bool:
        """Abandon the actor's pending invocation, if any."""
        pending = self.sessions.close(ctx.chat_id, ctx.actor_id)
        if pending is None:
            await reply(t("session.nothing_pending", ctx.locale))
            return False
        pending.collector.abandon()
        await reply(t("session.cancelled", ctx.locale))
        return True

    async def _is_elevated(self, ctx: CommandContext) -> bool:
        """Elevated tier in this community, per its configured roles."""
        settings = await self.load_settings(ctx.community_id) if self.load_settings else None
        return compute_tier(ctx.roles, RoleSettings.from_settings(settings)) is PermissionTier.ELEVATED

    def expire(self) -> list[PendingInvocation]:
        """Drop every invocation whose reply deadline passed."""
        return self.sessions.sweep()

    async def _continue(
        self,
        command: Command,
        ctx: CommandContext,
        collector: ArgumentCollector,
        step: Step,
        reply: Reply,
    ):
        if step.awaiting:
            pending, _ = self.sessions.get(ctx.chat_id, ctx.actor_id)
            if pending is not None and pending.collector is collector:
                self.sessions.touch(pending)
            else:
                self.sessions.open(command, ctx, collector)
            hint = t("session.cancel_hint", ctx.locale, cancel_word=self.cancel_word)
            await reply(f"{step.prompt}\n\n_{hint}_")
            return

        self.sessions.close(ctx.chat_id, ctx.actor_id)
        if not step.done:
            await reply(t("session.cancelled", ctx.locale))
            return

        result = await command.execute(ctx, step.arguments)
        if not result.silent:
            await reply(result.reply)

    async def _report(self, e: Exception, command: Command, ctx: CommandContext, reply: Reply):
        if isinstance(e, NotFoundError):
            logger.debug(f"/{command.name}: nothing found ({e.key})")
            return
        if is_reportable(e):
            logger.info(f"/{command.name} refused for {ctx.actor_id}: {e.key}")
            await reply(t(e.key, ctx.locale, **e.params))
            return
        if isinstance(e, TagbotError):
            logger.warning(f"/{command.name}: unhandled {e!r}")
        else:
            logger.error(f"/{command.name} failed: {e}", exc_info=e)
        await reply(classify_error(e, ctx.locale))
