"""Command base class."""

from typing import Sequence

from .args import ArgumentCollector, SpecEntry, TypeResolver
from .base import CommandContext, CommandResult


class Command:
    """A chat command: declared arguments, a permission pre-check, an action.

    The chat layer drives every command the same way:
    check_permissions() → collector() until done → execute().
    """

    name: str = ""
    aliases: tuple[str, ...] = ()
    description: str = ""
    specs: Sequence[SpecEntry] = ()
    resolvers: dict[str, TypeResolver] = {}

    @property
    def triggers(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    async def check_permissions(self, ctx: CommandContext) -> None:
        """Refuse the command before any argument is collected.

        Raises AuthorizationError to refuse. Default: allow.
        """
        return None

    def collector(self, ctx: CommandContext, cancel_word: str = "cancel") -> ArgumentCollector:
        return ArgumentCollector(self.specs, ctx, resolvers=self.resolvers, cancel_word=cancel_word)

    async def execute(self, ctx: CommandContext, args: dict) -> CommandResult:
        raise NotImplementedError
