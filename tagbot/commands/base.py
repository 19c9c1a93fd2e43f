"""Command primitives shared by every chat command."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CommandContext:
    """Who invoked a command, and where.

    Built by the chat adapter per invocation. Nothing in here is
    persisted or shared between invocations.
    """
    actor_id: str
    actor_name: str
    chat_id: int
    community_id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    locale: str = "en"
    message_id: Optional[int] = None

    @property
    def mention(self) -> str:
        return self.actor_name or self.actor_id


@dataclass
class CommandResult:
    """What a command wants said back to the actor.

    ``reply`` is markdown; the chat layer converts it for delivery.
    An empty result means the command ended silently.
    """
    reply: Optional[str] = None

    @property
    def silent(self) -> bool:
        return not self.reply
