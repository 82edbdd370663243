"""
analyse-nutrition: hand a food photo to the nutrition workflow.

Fire-and-forget: the user gets an immediate acknowledgement and the
workflow posts its analysis back to the channel on its own, using the
origin context in the payload. Webhook failures are only logged, since
the acknowledgement has already been sent.

Payload:
    {"imageUrl": ..., "imageName": ..., "imageSize": ..., "message": "...",
     "discord": {...origin context...}}
"""

from __future__ import annotations

from typing import Any, Mapping

from n8nrelay.commands.base import (
    Command,
    CommandDefinition,
    CommandParameter,
    Invocation,
    ParameterKind,
)
from n8nrelay.config.logging import get_logger
from n8nrelay.errors import UsageError
from n8nrelay.transport.context import AttachmentRef, merge_with_payload
from n8nrelay.webhook.client import WebhookClient

logger = get_logger(__name__)

ACKNOWLEDGEMENT = "🥗 Analyzing nutrition information..."


class AnalyseNutritionCommand(Command):
    """
    Args:
        webhook: Client used for the fire-and-forget call
        webhook_path: Path of the nutrition workflow's webhook (from N8N_NUTRITION_WEBHOOK)
    """

    definition = CommandDefinition(
        name="analyse-nutrition",
        description="Analyze nutrition information from an image",
        parameters=(
            CommandParameter(
                name="image",
                kind=ParameterKind.ATTACHMENT,
                required=True,
                description="Image to analyze for nutrition information",
            ),
            CommandParameter(
                name="message",
                kind=ParameterKind.STRING,
                required=False,
                description="Additional message or context (optional)",
            ),
        ),
        usage_hint="[context text] (attach an image)",
    )

    def __init__(self, webhook: WebhookClient, webhook_path: str):
        self._webhook = webhook
        self._webhook_path = webhook_path

    def validate(self, args: Mapping[str, Any], prefix: str) -> None:
        # Slash commands always carry the image; text commands may send text only
        image = args.get("image")
        message = args.get("message")
        if image is None and not (isinstance(message, str) and message.strip()):
            raise UsageError(self.usage_for(prefix))

    async def execute(self, invocation: Invocation) -> None:
        image: AttachmentRef | None = invocation.args.get("image")

        await invocation.reply.acknowledge(ACKNOWLEDGEMENT)

        payload: dict[str, Any] = {}
        if image is not None:
            payload.update(
                imageUrl=image.url,
                imageName=image.name,
                imageSize=image.size_bytes,
            )
        payload["message"] = invocation.get_text("message")

        await self._webhook.send(
            self._webhook_path,
            merge_with_payload(payload, invocation.context),
            await_response=False,
        )
        logger.info(
            f"Nutrition analysis queued for {invocation.context.author} "
            f"({image.name if image else 'text only'})"
        )
