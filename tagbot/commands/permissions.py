"""Permission gate for tag commands.

Two checks, in this order:

1. Restricted role: runs before any argument is collected. Holding the
   community's restricted role refuses the whole command, even for the
   owner of the tag.
2. Edit rights: after the tag is known. Owners may always edit their
   own tags; the elevated tier may edit anyone's tag and is the only
   tier allowed to change the hoisted/templated flags.

Role names come from community settings. Role storage itself lives in
the chat service and the settings table, not here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger("tagbot.commands.permissions")

# Telegram chat-member statuses that count as elevated when a community
# has not configured its own moderator role.
DEFAULT_ELEVATED_ROLES = frozenset({"creator", "administrator"})


class PermissionTier(str, Enum):
    NONE = "none"
    ELEVATED = "elevated"


@dataclass(frozen=True)
class RoleSettings:
    """Role configuration for one community."""
    mod_role: Optional[str] = None
    restricted_role: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Optional[dict]) -> "RoleSettings":
        """Build from a community_settings row (``mod_role``, ``restrict_roles``)."""
        if not settings:
            return cls()
        restrict_roles = settings.get("restrict_roles") or {}
        return cls(
            mod_role=settings.get("mod_role") or None,
            restricted_role=restrict_roles.get("tag") or None,
        )

    @property
    def elevated_roles(self) -> frozenset[str]:
        if self.mod_role:
            return frozenset({self.mod_role})
        return DEFAULT_ELEVATED_ROLES


@dataclass(frozen=True)
class EditRights:
    can_edit: bool
    can_change_flags: bool


def check_restricted(roles: Iterable[str], role_settings: RoleSettings) -> tuple[bool, str]:
    """Pre-condition check, run before argument collection.

    Returns:
        Tuple of (allowed: bool, reason: str). Reason is "Restricted"
        when refused, empty otherwise.
    """
    restricted = role_settings.restricted_role
    if restricted and restricted in set(roles):
        logger.info(f"Restricted role '{restricted}' refused tag command")
        return False, "Restricted"
    return True, ""


def compute_tier(roles: Iterable[str], role_settings: RoleSettings) -> PermissionTier:
    """Derive the actor's tier for this invocation. Never persisted."""
    if role_settings.elevated_roles & set(roles):
        return PermissionTier.ELEVATED
    return PermissionTier.NONE


def edit_rights(actor_id: str, owner_id: str, tier: PermissionTier) -> EditRights:
    """Compute what the actor may do to a resource owned by owner_id."""
    elevated = tier is PermissionTier.ELEVATED
    is_owner = str(actor_id) == str(owner_id)
    return EditRights(
        can_edit=is_owner or elevated,
        can_change_flags=elevated,
    )
