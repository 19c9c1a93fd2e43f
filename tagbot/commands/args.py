"""Argument collection: resumable, prompt-driven parsing of command input.

A command declares an ordered list of ArgumentSpec (or ConditionalSpec)
entries. The ArgumentCollector walks them against the raw input:

  phrase  next unconsumed phrase ("Test 1" counts as one phrase)
  flag    True if any of the spec's flag spellings appears anywhere
  rest    remaining free text, original spacing kept, flags removed

When a prompted spec has no value, or its type resolver rejects the
value, the collector suspends and hands back a prompt. The chat layer
feeds the actor's next message into resume(). A spec without a prompt
never suspends: a missing or rejected value is recorded as None and
collection moves on.

The collector is an explicit state machine. Nothing here talks to the
chat service; prompts are returned, not sent.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from .base import CommandContext

logger = logging.getLogger("tagbot.commands.args")

# Resolver contract: return the resolved value, or None to reject.
TypeResolver = Callable[[str, CommandContext], Awaitable[Any]]

_TOKEN_RE = re.compile(r'"([^"]*)"|“([^”]*)”|(\S+)')


class Match(str, Enum):
    PHRASE = "phrase"
    FLAG = "flag"
    REST = "rest"


@dataclass(frozen=True)
class Prompt:
    """Prompt templates for a spec. ``retry`` receives the failing value."""
    start: Callable[[CommandContext], str]
    retry: Optional[Callable[[CommandContext, str], str]] = None


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    match: Match = Match.PHRASE
    type: Optional[str] = None          # key into the resolver table; None = raw text
    flags: tuple[str, ...] = ()
    prompt: Optional[Prompt] = None


@dataclass(frozen=True)
class ConditionalSpec:
    """Pick one of two specs based on the arguments collected so far."""
    condition: Callable[[dict], bool]
    when_true: ArgumentSpec
    when_false: ArgumentSpec

    def select(self, collected: dict) -> ArgumentSpec:
        return self.when_true if self.condition(collected) else self.when_false

    @property
    def branches(self) -> tuple[ArgumentSpec, ArgumentSpec]:
        return self.when_true, self.when_false


SpecEntry = Union[ArgumentSpec, ConditionalSpec]


# ============================================================
# TOKENIZING
# ============================================================

@dataclass(frozen=True)
class Token:
    text: str
    start: int
    end: int
    quoted: bool = False


class ParsedInput:
    """Raw command input split into phrases and flags, with a cursor."""

    def __init__(self, raw: str, phrases: list[Token], flags: list[Token]):
        self.raw = raw
        self.phrases = phrases
        self.flags = flags
        self._flag_set = {tok.text.lower() for tok in flags}
        self._cursor = 0

    @classmethod
    def parse(cls, raw: str, known_flags: Sequence[str]) -> "ParsedInput":
        known = {f.lower() for f in known_flags}
        phrases: list[Token] = []
        flags: list[Token] = []
        for m in _TOKEN_RE.finditer(raw or ""):
            if m.group(3) is not None:
                text = m.group(3)
                if text.lower() in known:
                    flags.append(Token(text, m.start(), m.end()))
                    continue
                phrases.append(Token(text, m.start(), m.end()))
            else:
                text = m.group(1) if m.group(1) is not None else m.group(2)
                phrases.append(Token(text, m.start(), m.end(), quoted=True))
        return cls(raw or "", phrases, flags)

    def has_flag(self, spellings: Sequence[str]) -> bool:
        return any(s.lower() in self._flag_set for s in spellings)

    def take_phrase(self) -> Optional[str]:
        if self._cursor >= len(self.phrases):
            return None
        token = self.phrases[self._cursor]
        self._cursor += 1
        return token.text

    def take_rest(self) -> Optional[str]:
        """Everything from the next phrase to the end, minus flag tokens."""
        if self._cursor >= len(self.phrases):
            return None
        start = self.phrases[self._cursor].start
        self._cursor = len(self.phrases)

        pieces = []
        pos = start
        for flag in self.flags:
            if flag.end <= start:
                continue
            pieces.append(self.raw[pos:flag.start].rstrip(" \t"))
            pos = flag.end
        pieces.append(self.raw[pos:])
        text = "".join(pieces).strip()
        return text or None


# ============================================================
# COLLECTOR
# ============================================================

class CollectorStatus(str, Enum):
    RUNNING = "running"
    AWAITING = "awaiting"
    DONE = "done"
    ABANDONED = "abandoned"


@dataclass
class Step:
    """Outcome of driving the collector one step."""
    status: CollectorStatus
    prompt: Optional[str] = None
    arguments: dict = field(default_factory=dict)

    @property
    def done(self) -> bool:
        return self.status is CollectorStatus.DONE

    @property
    def awaiting(self) -> bool:
        return self.status is CollectorStatus.AWAITING


class ArgumentCollector:
    """Drives one invocation's argument collection.

    State: current spec index, collected arguments, the pending spec and
    its prompt text while suspended. start() runs until the first
    suspension or completion; resume() feeds one reply.
    """

    def __init__(
        self,
        specs: Sequence[SpecEntry],
        ctx: CommandContext,
        resolvers: Optional[dict[str, TypeResolver]] = None,
        cancel_word: str = "cancel",
    ):
        self.specs = list(specs)
        self.ctx = ctx
        self.resolvers = resolvers or {}
        self.cancel_word = cancel_word
        self.index = 0
        self.collected: dict[str, Any] = {}
        self.status = CollectorStatus.RUNNING
        self.pending: Optional[ArgumentSpec] = None
        self.pending_prompt: Optional[str] = None
        self._input: Optional[ParsedInput] = None

        for spec in self._all_specs():
            if spec.type is not None and spec.type not in self.resolvers:
                raise ValueError(f"No resolver registered for type '{spec.type}' ({spec.name})")

    def _all_specs(self) -> list[ArgumentSpec]:
        out = []
        for entry in self.specs:
            if isinstance(entry, ConditionalSpec):
                out.extend(entry.branches)
            else:
                out.append(entry)
        return out

    @property
    def flag_names(self) -> list[str]:
        return [f for spec in self._all_specs() if spec.match is Match.FLAG for f in spec.flags]

    async def start(self, raw: str) -> Step:
        """Parse the raw input and collect until done or a prompt is needed."""
        if self._input is not None:
            raise RuntimeError("Collector already started")
        self._input = ParsedInput.parse(raw, self.flag_names)
        return await self._advance()

    async def resume(self, reply: str) -> Step:
        """Feed the actor's reply to the pending prompt."""
        if self.status is not CollectorStatus.AWAITING or self.pending is None:
            raise RuntimeError(f"Collector is not awaiting input (status={self.status.value})")

        text = (reply or "").strip()
        if text.lower() == self.cancel_word.lower():
            return self.abandon()

        spec = self.pending
        value = await self._resolve(spec, text) if text else None
        if value is None:
            return self._suspend(spec, failure=text or None)

        self.collected[spec.name] = value
        self.pending = None
        self.pending_prompt = None
        self.status = CollectorStatus.RUNNING
        self.index += 1
        return await self._advance()

    def abandon(self) -> Step:
        """Terminate the invocation. Collected values are discarded."""
        logger.debug(f"Argument collection abandoned at spec {self.index}")
        self.status = CollectorStatus.ABANDONED
        self.pending = None
        self.pending_prompt = None
        self.collected.clear()
        return Step(CollectorStatus.ABANDONED)

    async def _advance(self) -> Step:
        while self.index < len(self.specs):
            entry = self.specs[self.index]
            spec = entry.select(self.collected) if isinstance(entry, ConditionalSpec) else entry

            if spec.match is Match.FLAG:
                self.collected[spec.name] = self._input.has_flag(spec.flags)
                self.index += 1
                continue

            if spec.match is Match.PHRASE:
                token = self._input.take_phrase()
            else:
                token = self._input.take_rest()

            value = await self._resolve(spec, token) if token is not None else None
            if value is None and spec.prompt is not None:
                return self._suspend(spec, failure=token)

            self.collected[spec.name] = value
            self.index += 1

        self.status = CollectorStatus.DONE
        return Step(CollectorStatus.DONE, arguments=dict(self.collected))

    async def _resolve(self, spec: ArgumentSpec, text: str) -> Any:
        if spec.type is None:
            return text
        return await self.resolvers[spec.type](text, self.ctx)

    def _suspend(self, spec: ArgumentSpec, failure: Optional[str]) -> Step:
        if failure is not None and spec.prompt.retry is not None:
            text = spec.prompt.retry(self.ctx, failure)
        else:
            text = spec.prompt.start(self.ctx)
        self.status = CollectorStatus.AWAITING
        self.pending = spec
        self.pending_prompt = text
        return Step(CollectorStatus.AWAITING, prompt=text)
