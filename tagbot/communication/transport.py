"""Transport: deliver rendered lookup messages to Telegram chats.

Telegram has no rich embeds, so a RenderedMessage becomes one HTML
message: a status marker in place of the embed color, the linked
title, the author, each field as a bold heading with its value, and the
footer with the timestamp. A message always goes out as a single Telegram
message, shortened to fit if needed, so a failed delivery never leaves
half of it in the chat. Delivery failures are logged, never retried.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from telegram import LinkPreviewOptions

from ..github.classifier import STATE_COLORS
from ..github.render import RenderedMessage, truncate_text
from .formatting import escape, escape_attr, markdown_to_telegram_html

logger = logging.getLogger("tagbot.transport")

TELEGRAM_MESSAGE_LIMIT = 4096

# Embed colors → status markers
COLOR_MARKERS = {
    STATE_COLORS["OPEN"]: "🟢",
    STATE_COLORS["CLOSED"]: "🔴",
    STATE_COLORS["MERGED"]: "🟣",
    STATE_COLORS["DRAFT"]: "⚪",
}


def format_timestamp(value: Optional[str]) -> str:
    """ISO-8601 from GitHub → 'YYYY-MM-DD HH:MM UTC'. Unparseable values pass through."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M UTC")


def render_html(message: RenderedMessage) -> str:
    """Render a RenderedMessage as Telegram HTML."""
    marker = COLOR_MARKERS.get(message.color, "🔘")
    lines = [f'{marker} <b><a href="{escape_attr(message.url)}">{escape(message.title)}</a></b>']

    author = escape(message.author.name)
    if message.author.url:
        author = f'<a href="{escape_attr(message.author.url)}">{author}</a>'
    lines.append(author)

    for field in message.fields:
        lines.append("")
        lines.append(f"<b>{escape(field.name)}</b>")
        lines.append(markdown_to_telegram_html(field.value))

    footer = escape(message.footer.text)
    timestamp = format_timestamp(message.timestamp)
    if timestamp:
        footer = f"{footer} • {timestamp}" if footer else timestamp
    if footer:
        lines.append("")
        lines.append(f"<i>{footer}</i>")

    return "\n".join(lines)


def fit_html(message: RenderedMessage, max_length: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    """Render a message as HTML no longer than max_length.

    Trailing fields are dropped first, then the footer is shortened.
    """
    html = render_html(message)
    while len(html) > max_length and message.fields:
        message = replace(message, fields=message.fields[:-1])
        html = render_html(message)

    while len(html) > max_length and message.footer.text:
        overflow = len(html) - max_length
        text = message.footer.text
        footer = replace(message.footer, text=truncate_text(text, len(text) - overflow))
        message = replace(message, footer=footer)
        html = render_html(message)

    if len(html) > max_length:
        logger.warning(f"Rendered message still {len(html)} chars after shortening")
    return html


async def send_rendered(bot, chat_id: int, message: RenderedMessage) -> bool:
    """Send a rendered message to a chat. Returns False if delivery failed."""
    try:
        await bot.send_message(
            chat_id=chat_id,
            text=fit_html(message),
            parse_mode="HTML",
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )
        return True
    except Exception as e:
        logger.error(f"Failed to deliver message to {chat_id}: {e}")
        return False
