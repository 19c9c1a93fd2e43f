"""Markdown to Telegram HTML converter.

Telegram supports a limited HTML subset:
  <b>bold</b>, <i>italic</i>, <s>strikethrough</s>,
  <code>inline code</code>, <pre>code block</pre>, <a href="url">link</a>

Command replies, prompts and message fields are written in markdown;
this module converts them to safe Telegram HTML.
"""

import re
import html as _html


def escape(text: str) -> str:
    """Escape HTML special characters in plain text segments."""
    return _html.escape(text, quote=False)


def escape_attr(text: str) -> str:
    """Escape text for use inside a double-quoted attribute."""
    return _html.escape(text, quote=True)


def markdown_to_telegram_html(text: str) -> str:
    """Convert markdown-formatted text to Telegram-safe HTML.

    Handles:
    - **bold** → <b>bold</b>
    - *italic* / _italic_ → <i>italic</i>
    - `inline code` → <code>inline code</code>
    - ```code blocks``` → <pre>code blocks</pre>
    - [text](url) → <a href="url">text</a>
    - ~~strikethrough~~ → <s>strikethrough</s>

    Text outside of these patterns is HTML-escaped.
    """
    if not text:
        return text

    result = []
    lines = text.split('\n')
    i = 0

    while i < len(lines):
        line = lines[i]

        # Code block: ```...```
        if line.strip().startswith('```'):
            code_lines = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith('```'):
                code_lines.append(lines[i])
                i += 1
            if i < len(lines):
                i += 1
            result.append(f'<pre>{escape(chr(10).join(code_lines))}</pre>')
            continue

        result.append(_format_inline(line))
        i += 1

    return '\n'.join(result)


def _format_inline(text: str) -> str:
    """Apply inline markdown formatting to a single line, protecting code spans."""
    parts = []
    last_end = 0
    for match in re.finditer(r'`([^`]+)`', text):
        if match.start() > last_end:
            parts.append(_format_text_segment(text[last_end:match.start()]))
        parts.append(f'<code>{escape(match.group(1))}</code>')
        last_end = match.end()
    if last_end < len(text):
        parts.append(_format_text_segment(text[last_end:]))
    return ''.join(parts)


def _format_text_segment(text: str) -> str:
    """Apply bold, italic, links, strikethrough to a text segment."""
    text = escape(text)

    # Links first so their text can still be bold/italic
    text = re.sub(
        r'\[([^\]]+)\]\(([^)\s]+)\)',
        lambda m: f'<a href="{m.group(2).replace(chr(34), "&quot;")}">{m.group(1)}</a>',
        text,
    )

    text = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', text)
    # Italic only at word boundaries, so snake_case names survive
    text = re.sub(r'(?<!\w)\*([^*]+?)\*(?!\w)', r'<i>\1</i>', text)
    text = re.sub(r'(?<![\w/])_([^_]+?)_(?!\w)', r'<i>\1</i>', text)
    text = re.sub(r'~~(.+?)~~', r'<s>\1</s>', text)

    return text
