"""Error taxonomy and user-facing error classification.

Every error raised on purpose by a command carries a localization key
and its parameters, so the chat layer can reply in the actor's locale.

- ValidationError:    malformed owner/repository/number, content too long
- AuthorizationError: not the owner, restricted role
- NotFoundError:      entity absent (terminates silently)
- ConfigurationError: missing credential (never includes the credential)
"""

import asyncio
from typing import Any, Optional

import asyncpg
import httpx

from .i18n import t


class TagbotError(Exception):
    """Base class for errors reported through the localization layer."""

    def __init__(self, key: str, **params: Any):
        super().__init__(key)
        self.key = key
        self.params = params

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"


class ValidationError(TagbotError):
    """Input failed validation. Replied to the actor, never retried."""


class AuthorizationError(TagbotError):
    """Actor may not perform this action. Replied to the actor."""


class NotFoundError(TagbotError):
    """Nothing to show. Terminates without a reply."""


class ConfigurationError(TagbotError):
    """A required credential or setting is missing."""


def is_reportable(e: Exception) -> bool:
    """Whether an error should be replied to the actor as a short message."""
    return isinstance(e, (ValidationError, AuthorizationError, ConfigurationError))


def classify_error(e: Exception, locale: Optional[str] = None) -> str:
    """Classify an unexpected exception into a user-friendly message.

    Only used for failures that escaped the command itself. Returns a
    short localized string suitable for sending directly to the user.
    """
    if isinstance(e, httpx.HTTPStatusError):
        code = e.response.status_code
        if code == 429:
            return t("errors.github_rate_limited", locale)
        if code in (401, 403):
            return t("errors.github_auth", locale)
        if 500 <= code < 600:
            return t("errors.github_server", locale)
        return t("errors.github_http", locale, code=code)

    if isinstance(e, httpx.ConnectError):
        return t("errors.connect", locale)
    if isinstance(e, (httpx.TimeoutException, asyncio.TimeoutError)):
        return t("errors.timeout", locale)

    if isinstance(e, asyncpg.InterfaceError):
        return t("errors.db_pool", locale)
    if isinstance(e, asyncpg.PostgresError):
        return t("errors.db", locale)

    return t("common.unexpected", locale)
