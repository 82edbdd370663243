"""
n8n webhook layer.

WebhookClient posts JSON to {base_url}/webhook/{path} and normalizes the
outcome into a WebhookResult; formatting helpers turn results into
Discord-sized message text.
"""

from n8nrelay.webhook.client import API_KEY_HEADER, WebhookClient
from n8nrelay.webhook.formatting import (
    MAX_MESSAGE_LENGTH,
    format_webhook_error,
    format_webhook_reply,
    render_body,
    truncate_text,
)
from n8nrelay.webhook.models import WebhookResult

__all__ = [
    "API_KEY_HEADER",
    "MAX_MESSAGE_LENGTH",
    "WebhookClient",
    "WebhookResult",
    "format_webhook_error",
    "format_webhook_reply",
    "render_body",
    "truncate_text",
]
