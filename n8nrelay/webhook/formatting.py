"""
Rendering of webhook bodies into Discord message text.

Discord rejects messages longer than 2000 characters, so every reply built
here is clipped to fit, with "..." marking the cut.
"""

from __future__ import annotations

import json
from typing import Any

MAX_MESSAGE_LENGTH = 2000
TRUNCATION_MARKER = "..."

SUCCESS_BANNER = "✅ Webhook triggered successfully!"
FAILURE_PREFIX = "❌ Failed to trigger webhook: "


def render_body(data: Any) -> str:
    """Strings pass through untouched; anything else is pretty-printed JSON."""
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False)


def truncate_text(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Clip text to `limit` characters.

    Text over the limit keeps its first `limit - 3` characters followed by
    the truncation marker, so a 2000 limit yields 1997 characters + "...".
    """
    if len(text) <= limit:
        return text
    return text[: limit - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


def format_webhook_reply(text: str, banner: str = SUCCESS_BANNER) -> str:
    """
    Wrap a webhook response in a success banner and a code block.

    Bodies that fit are shown in a ```json block. Longer bodies are cut so
    that the whole message, banner and fences included, stays within
    MAX_MESSAGE_LENGTH; the cut body goes in a plain ``` block.

    The limit applies to the sent message, not the body alone: a body of
    up to 2000 characters is still cut when the banner and fences would
    push the message past what Discord accepts.
    """
    reply = f"{banner}\n```json\n{text}\n```"
    if len(reply) <= MAX_MESSAGE_LENGTH:
        return reply

    head = f"{banner}\n```\n"
    tail = "\n```"
    budget = MAX_MESSAGE_LENGTH - len(head) - len(tail)
    return f"{head}{truncate_text(text, budget)}{tail}"


def format_webhook_error(message: str) -> str:
    return truncate_text(f"{FAILURE_PREFIX}{message}")
