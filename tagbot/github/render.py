"""Message assembly for issue/PR lookups.

build_message() composes the structured message in a fixed order:
base (author, title, footer, color, timestamp) → install hint → review
summary, then runs truncate_message() so the result always fits the
transport's structural limits.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from ..i18n import t
from .classifier import Classification
from .models import RawEntity

# Structural limits of a rich message
TITLE_LIMIT = 256
AUTHOR_LIMIT = 256
FOOTER_LIMIT = 2048
FIELD_NAME_LIMIT = 256
FIELD_VALUE_LIMIT = 1024
FIELD_COUNT_LIMIT = 25
TOTAL_LIMIT = 6000

ELLIPSIS = "…"


@dataclass(frozen=True)
class MessageAuthor:
    name: str
    url: str = ""
    icon_url: str = ""


@dataclass(frozen=True)
class MessageFooter:
    text: str
    icon_url: str = ""


@dataclass(frozen=True)
class MessageField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class RenderedMessage:
    author: MessageAuthor
    title: str
    url: str
    footer: MessageFooter
    color: int
    timestamp: Optional[str] = None
    fields: tuple[MessageField, ...] = field(default_factory=tuple)

    @property
    def total_length(self) -> int:
        return (
            len(self.title)
            + len(self.author.name)
            + len(self.footer.text)
            + sum(len(f.name) + len(f.value) for f in self.fields)
        )


def add_field(message: RenderedMessage, name: str, value: str, inline: bool = False) -> RenderedMessage:
    """Return a copy of the message with one more field appended."""
    return replace(message, fields=message.fields + (MessageField(name, value, inline),))


def truncate_text(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 0:
        return ""
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def truncate_message(message: RenderedMessage) -> RenderedMessage:
    """Shorten a message until it fits every structural limit. Never fails."""
    fields = tuple(
        MessageField(
            truncate_text(f.name, FIELD_NAME_LIMIT),
            truncate_text(f.value, FIELD_VALUE_LIMIT),
            f.inline,
        )
        for f in message.fields[:FIELD_COUNT_LIMIT]
    )
    message = replace(
        message,
        title=truncate_text(message.title, TITLE_LIMIT),
        author=replace(message.author, name=truncate_text(message.author.name, AUTHOR_LIMIT)),
        footer=replace(message.footer, text=truncate_text(message.footer.text, FOOTER_LIMIT)),
        fields=fields,
    )
    # Drop trailing fields until the total fits
    while message.fields and message.total_length > TOTAL_LIMIT:
        message = replace(message, fields=message.fields[:-1])
    return message


def footer_text(entity: RawEntity, classification: Classification, locale: str) -> str:
    """Comment count (omitted when zero) followed by the action phrase."""
    parts = []
    if entity.comment_count:
        count = t("command.issue-pr.comment_count", locale, count=entity.comment_count)
        parts.append(f"({count})")
    parts.append(t(classification.action.key, locale, **classification.action.params))
    return " ".join(parts)


def install_field(classification: Classification, locale: str, install_command: str) -> Optional[MessageField]:
    target = classification.install
    if target is None:
        return None
    unknown = t("command.issue-pr.unknown", locale)
    repository = target.repository or unknown
    branch = target.branch or unknown
    return MessageField(
        name=t("command.issue-pr.heading.install", locale),
        value=f"`{install_command} {repository}#{branch}`",
    )


def review_field(classification: Classification, locale: str) -> Optional[MessageField]:
    summary = classification.reviews
    if summary is None or not summary.entries:
        return None
    body = ", ".join(
        f"{entry.reviewer} [{t(entry.state_key, locale)}]({entry.url})"
        for entry in summary.entries
    )
    return MessageField(name=t(summary.heading_key, locale), value=body)


def build_message(
    entity: RawEntity,
    classification: Classification,
    locale: str = "en",
    install_command: str = "npm i",
) -> RenderedMessage:
    """Compose and truncate the lookup message for one entity."""
    message = RenderedMessage(
        author=MessageAuthor(
            name=entity.author.login,
            url=entity.author.url,
            icon_url=entity.author.avatar_url,
        ),
        title=f"#{entity.number} {entity.title}",
        url=entity.url,
        footer=MessageFooter(
            text=footer_text(entity, classification, locale),
            icon_url=classification.icon,
        ),
        color=classification.color,
        timestamp=classification.timestamp,
    )

    install = install_field(classification, locale, install_command)
    if install:
        message = add_field(message, install.name, install.value)

    reviews = review_field(classification, locale)
    if reviews:
        message = add_field(message, reviews.name, reviews.value)

    return truncate_message(message)
