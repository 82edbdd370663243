"""
RelayCog: entry point for both command transports.

Two entry points, one dispatcher:
  - /<command> ...          (slash command interaction)
  - !<command> ...          (prefixed text message, legacy)

Each listener builds an Invocation (name, arguments, origin context, reply
sink) and hands it to the bot's CommandDispatcher.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from n8nrelay.commands.base import Invocation
from n8nrelay.config.logging import get_logger
from n8nrelay.transport.arguments import (
    bind_text_arguments,
    interaction_arguments,
    is_chat_input,
    parse_prefixed,
)
from n8nrelay.transport.context import AttachmentRef, from_interaction, from_message
from n8nrelay.transport.replies import InteractionReplySink, MessageReplySink

logger = get_logger(__name__)

CHANNEL_NOT_ALLOWED = "I'm not configured to respond in this channel."


class RelayCog(commands.Cog):
    """Feeds slash commands and prefixed messages to the dispatcher."""

    def __init__(self, bot) -> None:
        self.bot = bot

    # ------------------------------------------------------------------
    # Slash commands
    # ------------------------------------------------------------------

    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if not is_chat_input(interaction):
            return

        reply = InteractionReplySink(interaction)
        if not self.bot.is_allowed_channel(interaction.channel_id):
            await reply.reply_once(CHANNEL_NOT_ALLOWED, ephemeral=True)
            return

        invocation = Invocation(
            command_name=interaction.data["name"],
            args=interaction_arguments(interaction),
            context=from_interaction(interaction),
            reply=reply,
        )
        await self.bot.dispatcher.dispatch(invocation)

    # ------------------------------------------------------------------
    # Prefixed text commands
    # ------------------------------------------------------------------

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Handle "<prefix><command> [args]" messages.

        Ignores:
        - Messages from bots (including ourselves)
        - Messages without the configured prefix
        - Messages in non-allowed channels (if restriction is configured)
        """
        if message.author.bot:
            return

        prefix = self.bot.settings.discord.command_prefix
        parsed = parse_prefixed(message.content, prefix)
        if parsed is None:
            return
        if not self.bot.is_allowed_channel(message.channel.id):
            return

        name, rest = parsed
        command = self.bot.registry.get(name)
        attachments = [AttachmentRef.from_discord(a) for a in message.attachments]

        invocation = Invocation(
            command_name=name,
            args=bind_text_arguments(command.definition if command else None, rest, attachments),
            context=from_message(message),
            reply=MessageReplySink(message, prefix),
        )
        await self.bot.dispatcher.dispatch(invocation)
