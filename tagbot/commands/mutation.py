"""Mutation builder: turn collected edit arguments into one MutationRequest."""

import logging
from typing import Optional

from ..db.records import MutationKind, MutationRequest, TagRecord
from ..errors import AuthorizationError, ValidationError
from .permissions import PermissionTier, edit_rights

logger = logging.getLogger("tagbot.commands.mutation")

# Headroom under the chat service's 2000-character message limit.
MAX_CONTENT_LENGTH = 1950


def content_length(text: str) -> int:
    """Length in UTF-16 code units, the way chat services count message length."""
    return len(text.encode("utf-16-le")) // 2


def resolve_flag_pair(positive: bool, negative: bool, prior: bool) -> bool:
    """Paired opposite flags: positive wins, negative alone clears, neither keeps."""
    if positive:
        return True
    if negative:
        return False
    return prior


def build_mutation(
    args: dict,
    tier: PermissionTier,
    tag: TagRecord,
    actor_id: str,
) -> MutationRequest:
    """Build exactly one MutationRequest for a tag edit, or refuse.

    Args:
        args: Collected arguments (hoist, unhoist, templated, untemplated, content)
        tier: Actor's permission tier for this invocation
        tag: The stored tag being edited
        actor_id: Identity of the editor

    Raises:
        AuthorizationError: actor neither owns the tag nor is elevated
        ValidationError: content is too long
    """
    rights = edit_rights(actor_id, tag.owner_id, tier)
    if not rights.can_edit:
        raise AuthorizationError("command.tags.edit.own_tag")

    content: Optional[str] = args.get("content") or None
    if content is not None and content_length(content) >= MAX_CONTENT_LENGTH:
        raise ValidationError("command.tags.edit.too_long", limit=MAX_CONTENT_LENGTH)

    hoist = bool(args.get("hoist"))
    unhoist = bool(args.get("unhoist"))
    template = bool(args.get("templated"))
    untemplate = bool(args.get("untemplated"))

    # Flags only move for the elevated tier, and only when one of the pair was given.
    hoisted = tag.hoisted
    if rights.can_change_flags and (hoist or unhoist):
        hoisted = resolve_flag_pair(hoist, unhoist, tag.hoisted)

    templated = tag.templated
    if rights.can_change_flags and (template or untemplate):
        templated = resolve_flag_pair(template, untemplate, tag.templated)

    kind = MutationKind.CONTENT if content is not None else MutationKind.FLAGS
    logger.debug(
        f"Tag {tag.id} mutation: kind={kind.value} hoisted={hoisted} "
        f"templated={templated} tier={tier.value}"
    )
    return MutationRequest(
        kind=kind,
        tag_id=tag.id,
        hoisted=hoisted,
        templated=templated,
        editor_id=str(actor_id),
        content=content,
    )
