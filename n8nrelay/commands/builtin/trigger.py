"""
trigger: run any n8n workflow by webhook path and show its response.

    /trigger webhook:my-workflow data:{"key": "value"}
    !trigger my-workflow {"key": "value"}

The optional JSON object is merged with the origin context and POSTed to
{base_url}/webhook/{webhook}. The reply is deferred while the workflow runs
and edited with the result once it answers (or fails).
"""

from __future__ import annotations

import json
from typing import Any

from n8nrelay.commands.base import (
    Command,
    CommandDefinition,
    CommandParameter,
    Invocation,
    ParameterKind,
)
from n8nrelay.config.logging import get_logger
from n8nrelay.errors import InvalidPayloadError, UsageError
from n8nrelay.transport.context import merge_with_payload
from n8nrelay.webhook.client import WebhookClient
from n8nrelay.webhook.formatting import format_webhook_error, format_webhook_reply

logger = get_logger(__name__)


def parse_payload(raw: str | None, usage: str) -> dict[str, Any]:
    """
    Parse the optional `data` argument into a webhook body.

    Raises:
        InvalidPayloadError: If the text is not JSON, or not a JSON object
    """
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(f"❌ Invalid JSON provided. Usage: `{usage}`") from e
    if not isinstance(data, dict):
        raise InvalidPayloadError('❌ JSON data must be an object, e.g. `{"key": "value"}`.')
    return data


class TriggerCommand(Command):
    definition = CommandDefinition(
        name="trigger",
        description="Trigger an n8n webhook",
        parameters=(
            CommandParameter(
                name="webhook",
                kind=ParameterKind.STRING,
                required=True,
                description="Webhook path (e.g., my-workflow)",
            ),
            CommandParameter(
                name="data",
                kind=ParameterKind.STRING,
                required=False,
                description="JSON data to send (optional)",
            ),
        ),
        usage_hint="<webhook-path> [json-data]",
    )

    def __init__(self, webhook: WebhookClient):
        self._webhook = webhook

    async def execute(self, invocation: Invocation) -> None:
        webhook_path = invocation.get_text("webhook").lstrip("/")
        if not webhook_path:
            raise UsageError(self.usage_for(invocation.prefix))

        # Bad JSON is answered before deferring, and no call is made
        payload = parse_payload(invocation.args.get("data"), self.usage_for(invocation.prefix))

        await invocation.reply.defer()

        body = merge_with_payload(payload, invocation.context)
        result = await self._webhook.send(webhook_path, body, await_response=True)

        if result.ok:
            await invocation.reply.edit(format_webhook_reply(result.text))
        else:
            logger.warning(f"Error triggering webhook {webhook_path!r}: {result.error}")
            await invocation.reply.edit(format_webhook_error(result.error))
