"""Database query helpers for tagbot tables."""

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .connection import get_connection
from .records import MutationKind, MutationRequest, TagRecord

logger = logging.getLogger("tagbot.db.models")


# ============================================================
# TAGS
# ============================================================

async def get_tag(community_id: str, name: str) -> Optional[TagRecord]:
    """Find a tag by name or alias within a community (case-insensitive)."""
    async with get_connection() as conn:
        row = await conn.fetchrow("""
            SELECT id, name, user_id, content, hoisted, templated
            FROM tags
            WHERE community_id = $1
              AND (lower(name) = lower($2) OR lower($2) = ANY(SELECT lower(a) FROM unnest(aliases) a))
            LIMIT 1
        """, community_id, name)
        if not row:
            return None
        return TagRecord.from_row(row)


async def update_tag_content(
    tag_id: int,
    hoisted: bool,
    templated: bool,
    content: str,
    editor_id: str,
) -> bool:
    """Replace a tag's content and flags."""
    async with get_connection() as conn:
        result = await conn.execute("""
            UPDATE tags
            SET content = $4, hoisted = $2, templated = $3,
                last_modified = $5, updated_at = NOW()
            WHERE id = $1
        """, tag_id, hoisted, templated, content, editor_id)
        return result.endswith(" 1")


async def update_tag_flags(
    tag_id: int,
    hoisted: bool,
    templated: bool,
    editor_id: str,
) -> bool:
    """Update only a tag's hoisted/templated flags."""
    async with get_connection() as conn:
        result = await conn.execute("""
            UPDATE tags
            SET hoisted = $2, templated = $3, last_modified = $4, updated_at = NOW()
            WHERE id = $1
        """, tag_id, hoisted, templated, editor_id)
        return result.endswith(" 1")


async def apply_mutation(request: MutationRequest) -> bool:
    """Perform exactly one update for a MutationRequest. Not retried."""
    if request.kind is MutationKind.CONTENT:
        return await update_tag_content(
            request.tag_id,
            request.hoisted,
            request.templated,
            request.content,
            request.editor_id,
        )
    return await update_tag_flags(
        request.tag_id,
        request.hoisted,
        request.templated,
        request.editor_id,
    )


# ============================================================
# COMMUNITY SETTINGS
# ============================================================

async def get_community_settings(community_id: str) -> dict:
    """Load a community's settings row. Missing rows yield an empty dict."""
    async with get_connection() as conn:
        row = await conn.fetchrow("""
            SELECT locale, mod_role, restrict_roles, repository_aliases
            FROM community_settings WHERE community_id = $1
        """, community_id)
        if not row:
            return {}
        result = dict(row)
        # JSONB may come back as a string without a codec
        if isinstance(result.get("restrict_roles"), str):
            try:
                result["restrict_roles"] = json.loads(result["restrict_roles"])
            except (json.JSONDecodeError, TypeError):
                result["restrict_roles"] = {}
        return result


# ============================================================
# REPOSITORY ALIASES
# ============================================================

@dataclass(frozen=True)
class RepositoryEntry:
    owner: str
    repository: str


def parse_repository_aliases(entries: Optional[Iterable[str]]) -> dict[str, RepositoryEntry]:
    """Parse ``alias:owner/repository`` entries into a mapping.

    Malformed entries are skipped with a warning.
    """
    mapping: dict[str, RepositoryEntry] = {}
    for entry in entries or []:
        alias, sep, rest = entry.partition(":")
        owner, slash, repository = rest.partition("/")
        if not sep or not slash or not alias or not owner or not repository:
            logger.warning(f"Skipping malformed repository alias: {entry!r}")
            continue
        mapping[alias] = RepositoryEntry(owner=owner, repository=repository)
    return mapping


async def get_repository_aliases(community_id: str) -> dict[str, RepositoryEntry]:
    """Alias resolver: short alias → (owner, repository) for a community."""
    async with get_connection() as conn:
        entries = await conn.fetchval(
            "SELECT repository_aliases FROM community_settings WHERE community_id = $1",
            community_id,
        )
    return parse_repository_aliases(entries)


async def set_repository_alias(community_id: str, alias: str, owner: str, repository: str):
    """Add or replace one repository alias."""
    aliases = await get_repository_aliases(community_id)
    aliases[alias] = RepositoryEntry(owner=owner, repository=repository)
    await _store_aliases(community_id, aliases)


async def remove_repository_alias(community_id: str, alias: str) -> bool:
    """Remove a repository alias. Returns False if it did not exist."""
    aliases = await get_repository_aliases(community_id)
    if alias not in aliases:
        return False
    del aliases[alias]
    await _store_aliases(community_id, aliases)
    return True


async def _store_aliases(community_id: str, aliases: dict[str, RepositoryEntry]):
    entries = [f"{alias}:{e.owner}/{e.repository}" for alias, e in sorted(aliases.items())]
    async with get_connection() as conn:
        await conn.execute("""
            INSERT INTO community_settings (community_id, repository_aliases) VALUES ($1, $2)
            ON CONFLICT (community_id) DO UPDATE SET repository_aliases = $2, updated_at = NOW()
        """, community_id, entries)
