"""Chat commands and the argument-collection machinery they share."""

from .args import ArgumentCollector, ArgumentSpec, CollectorStatus, ConditionalSpec, Match, Prompt, Step
from .base import CommandContext, CommandResult
from .command import Command
from .issue_pr import IssuePRCommand
from .sessions import PromptSessions
from .tag_edit import TagEditCommand

__all__ = [
    "ArgumentCollector",
    "ArgumentSpec",
    "CollectorStatus",
    "ConditionalSpec",
    "Match",
    "Prompt",
    "Step",
    "CommandContext",
    "CommandResult",
    "Command",
    "IssuePRCommand",
    "PromptSessions",
    "TagEditCommand",
]
