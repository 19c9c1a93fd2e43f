"""Typed records exchanged with the persistence layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class TagRecord:
    id: int
    name: str
    owner_id: str
    content: str
    hoisted: bool = False
    templated: bool = False

    @classmethod
    def from_row(cls, row) -> "TagRecord":
        return cls(
            id=row["id"],
            name=row["name"],
            owner_id=str(row["user_id"]),
            content=row["content"],
            hoisted=bool(row["hoisted"]),
            templated=bool(row["templated"]),
        )


class MutationKind(str, Enum):
    CONTENT = "content"     # content + flags
    FLAGS = "flags"         # flags only


@dataclass(frozen=True)
class MutationRequest:
    """One fully resolved tag update.

    Every mutable field carries a value; fields the actor did not change
    hold the tag's prior value.
    """
    kind: MutationKind
    tag_id: int
    hoisted: bool
    templated: bool
    editor_id: str
    content: Optional[str] = None
