"""Pending prompt sessions.

While a command waits for the actor to answer a prompt, its collector
lives here, keyed by (chat id, actor id). This layer owns the attempt
ceiling and the reply deadline; the collector itself never gives up.

A session that expires, exceeds its attempts, is cancelled, or whose
chat disappears is simply dropped: nothing collected so far reaches the
command.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .args import ArgumentCollector
from .base import CommandContext
from .command import Command

logger = logging.getLogger("tagbot.commands.sessions")

SessionKey = tuple[int, str]


@dataclass
class PendingInvocation:
    command: Command
    ctx: CommandContext
    collector: ArgumentCollector
    deadline: float
    attempts: int = 0

    @property
    def key(self) -> SessionKey:
        return (self.ctx.chat_id, self.ctx.actor_id)


@dataclass
class PromptSessions:
    """Pending invocations, at most one per actor per chat.

    Args:
        timeout: Seconds an actor has to answer each prompt
        max_attempts: Replies allowed per invocation before giving up
        clock: Monotonic time source
    """
    timeout: float = 30.0
    max_attempts: int = 3
    clock: Callable[[], float] = time.monotonic
    _pending: dict[SessionKey, PendingInvocation] = field(default_factory=dict)

    def open(self, command: Command, ctx: CommandContext, collector: ArgumentCollector) -> PendingInvocation:
        """Park a suspended invocation. Replaces any earlier one for the same actor."""
        key = (ctx.chat_id, ctx.actor_id)
        previous = self._pending.pop(key, None)
        if previous:
            previous.collector.abandon()
            logger.debug(f"Replaced pending '{previous.command.name}' for {key}")
        pending = PendingInvocation(
            command=command,
            ctx=ctx,
            collector=collector,
            deadline=self.clock() + self.timeout,
        )
        self._pending[key] = pending
        return pending

    def get(self, chat_id: int, actor_id: str) -> tuple[Optional[PendingInvocation], bool]:
        """Look up a pending invocation.

        Returns:
            Tuple of (pending or None, expired: bool). An expired entry is
            dropped and returned as (None, True).
        """
        key = (chat_id, actor_id)
        pending = self._pending.get(key)
        if pending is None:
            return None, False
        if self.clock() > pending.deadline:
            self._drop(key)
            logger.info(f"Prompt for '{pending.command.name}' timed out ({key})")
            return None, True
        return pending, False

    def record_attempt(self, pending: PendingInvocation) -> bool:
        """Count one reply. Returns False once the ceiling is exceeded (and drops it)."""
        pending.attempts += 1
        if pending.attempts > self.max_attempts:
            self._drop(pending.key)
            logger.info(f"Too many attempts for '{pending.command.name}' ({pending.key})")
            return False
        return True

    def touch(self, pending: PendingInvocation):
        """Restart the reply deadline after a new prompt went out."""
        pending.deadline = self.clock() + self.timeout

    def close(self, chat_id: int, actor_id: str) -> Optional[PendingInvocation]:
        """Remove a pending invocation (finished or cancelled)."""
        return self._pending.pop((chat_id, actor_id), None)

    def drop_chat(self, chat_id: int) -> int:
        """The chat went away: abandon every invocation pending in it."""
        keys = [key for key in self._pending if key[0] == chat_id]
        for key in keys:
            self._drop(key)
        if keys:
            logger.info(f"Dropped {len(keys)} pending invocation(s) for chat {chat_id}")
        return len(keys)

    def sweep(self) -> list[PendingInvocation]:
        """Remove and return every expired invocation."""
        now = self.clock()
        expired = [p for p in self._pending.values() if now > p.deadline]
        for pending in expired:
            self._drop(pending.key)
        return expired

    def __len__(self) -> int:
        return len(self._pending)

    def _drop(self, key: SessionKey):
        pending = self._pending.pop(key, None)
        if pending:
            pending.collector.abandon()
