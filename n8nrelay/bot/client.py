"""
RelayBot: discord.py bot client.

Manages the full bot lifecycle:
- Opens the n8n WebhookClient once at startup
- Builds the command registry and dispatcher
- Loads the RelayCog, which feeds slash and prefixed commands to the dispatcher
- Publishes command metadata (guild-local for dev, global for production)
- Cleans up all resources on shutdown via AsyncExitStack

Slash commands are not declared through discord.py's CommandTree: their
metadata comes from the registry (so /reload can change it at runtime) and
is published with a bulk overwrite. The tree is kept inert so interactions
are only ever served by the relay dispatcher.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Sequence

import discord
from discord import app_commands
from discord.ext import commands

from n8nrelay.commands.base import CommandDefinition
from n8nrelay.commands.builtin import CommandServices, build_registry
from n8nrelay.commands.dispatcher import CommandDispatcher
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.config.logging import get_logger
from n8nrelay.config.settings import Settings
from n8nrelay.errors import ReloadError
from n8nrelay.webhook.client import WebhookClient

logger = get_logger(__name__)


class RelayCommandTree(app_commands.CommandTree):
    """Command tree that declines every interaction; RelayCog handles them."""

    async def interaction_check(self, interaction: discord.Interaction, /) -> bool:
        return False


class RelayBot(commands.Bot):
    """
    Discord bot relaying commands to n8n.

    Holds shared application state (webhook client, registry, dispatcher)
    and exposes it to the cog. Implements CommandPublisher for /reload.

    Args:
        settings: Full application settings (Discord token, n8n config, etc.)
    """

    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required to read prefixed commands
        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            tree_cls=RelayCommandTree,
            help_command=None,
        )
        self.settings = settings
        self.webhook_client: WebhookClient | None = None
        self.registry: CommandRegistry | None = None
        self.dispatcher: CommandDispatcher | None = None
        self._exit_stack = AsyncExitStack()

    async def setup_hook(self) -> None:
        """
        Called after login, before connecting to the Gateway.

        Opens the webhook client, builds the commands, loads the cog and
        publishes slash command metadata.
        """
        # --- 1. n8n webhook client (kept open for the bot's lifetime) ---
        self.webhook_client = await self._exit_stack.enter_async_context(
            WebhookClient.from_settings(self.settings.n8n)
        )
        logger.info(f"Connected to n8n at: {self.settings.n8n.base_url}")

        # --- 2. Commands ---
        services = CommandServices(
            webhook=self.webhook_client,
            settings=self.settings,
            publisher=self,
        )
        self.registry = build_registry(services)
        self.dispatcher = CommandDispatcher(self.registry)

        # --- 3. Load cog ---
        from n8nrelay.bot.cogs.relay import RelayCog
        await self.add_cog(RelayCog(self))
        logger.info("Cogs loaded")

        # --- 4. Publish slash command metadata ---
        try:
            await self.publish_commands(self.registry.list())
        except ReloadError as e:
            logger.warning(f"{e} The bot will still answer prefixed commands.")

    async def publish_commands(self, definitions: Sequence[CommandDefinition]) -> None:
        """
        Overwrite the application's slash commands with `definitions`.

        Raises:
            ReloadError: If Discord refuses the metadata
        """
        payload = [definition.to_discord_payload() for definition in definitions]
        guild_id = self.settings.discord.dev_guild_id
        try:
            if guild_id:
                await self.http.bulk_upsert_guild_commands(self.application_id, guild_id, payload)
                logger.info(f"Slash commands published to dev guild {guild_id} (instant)")
            else:
                await self.http.bulk_upsert_global_commands(self.application_id, payload)
                logger.info("Slash commands published globally (may take up to 1 hour to propagate)")
        except discord.Forbidden as e:
            raise ReloadError(
                "Could not publish slash commands (403 Forbidden). The bot is missing "
                "the 'applications.commands' OAuth2 scope."
            ) from e
        except discord.HTTPException as e:
            raise ReloadError(f"Slash command publishing failed: {e}") from e

    async def on_ready(self) -> None:
        """Called when the bot successfully connects to Discord."""
        logger.info(f"Discord bot is online as {self.user} (id: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def on_message(self, message: discord.Message) -> None:
        """Prefixed commands are routed by RelayCog, not discord.ext.commands."""

    async def close(self) -> None:
        """Graceful shutdown: drain webhook calls before disconnecting."""
        logger.info("Shutting down n8nrelay...")
        await self._exit_stack.aclose()
        await super().close()

    def is_allowed_channel(self, channel_id: int | None) -> bool:
        """
        Return True if the bot should respond in this channel.

        If `allowed_channel_ids` is empty (the default), the bot responds everywhere.
        If it's non-empty, the bot only responds in the listed channel IDs.
        """
        allowed = self.settings.discord.allowed_channel_ids
        return not allowed or channel_id in allowed
