"""Communication: conversion and delivery of outgoing messages.

- Formatting: markdown → Telegram HTML
- Transport: rendered lookup messages → Telegram chats
"""

from .formatting import markdown_to_telegram_html
from .transport import fit_html, render_html, send_rendered

__all__ = [
    "fit_html",
    "markdown_to_telegram_html",
    "render_html",
    "send_rendered",
]
