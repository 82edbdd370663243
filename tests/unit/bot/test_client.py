"""
Tests for RelayBot.

We test channel restriction and command publishing in isolation: the bot
is created with __new__ and its HTTP client is a mock, so no Discord
connection is required.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from n8nrelay.bot.client import RelayBot, RelayCommandTree
from n8nrelay.commands.base import CommandDefinition
from n8nrelay.config.settings import DiscordSettings, Settings
from n8nrelay.errors import ReloadError

APPLICATION_ID = 555


def _make_bot(allowed_channel_ids: list[int] | None = None, dev_guild_id: int | None = None) -> RelayBot:
    """Create a RelayBot with the given channel restriction and guild settings."""
    settings = MagicMock(spec=Settings)
    settings.discord = MagicMock(spec=DiscordSettings)
    settings.discord.command_prefix = "!"
    settings.discord.allowed_channel_ids = allowed_channel_ids or []
    settings.discord.dev_guild_id = dev_guild_id
    # Patch discord internals so __init__ doesn't require a real connection
    bot = RelayBot.__new__(RelayBot)
    bot.settings = settings
    bot._connection = MagicMock()
    bot._connection.application_id = APPLICATION_ID
    bot.http = MagicMock()
    bot.http.bulk_upsert_guild_commands = AsyncMock()
    bot.http.bulk_upsert_global_commands = AsyncMock()
    return bot


def _forbidden() -> discord.Forbidden:
    response = MagicMock()
    response.status = 403
    response.reason = "Forbidden"
    return discord.Forbidden(response, "Missing Access")


DEFINITIONS = [
    CommandDefinition(name="ping", description="Check if the bot is alive"),
    CommandDefinition(name="help", description="Show available commands and usage"),
]


class TestBotChannelRestriction:
    def test_empty_list_allows_all_channels(self):
        """When allowed_channel_ids is empty the bot responds everywhere."""
        bot = _make_bot([])
        assert bot.is_allowed_channel(111) is True
        assert bot.is_allowed_channel(999999) is True

    def test_listed_channel_is_allowed(self):
        """A channel ID in the list returns True."""
        bot = _make_bot([111, 222, 333])
        assert bot.is_allowed_channel(111) is True
        assert bot.is_allowed_channel(333) is True

    def test_unlisted_channel_is_blocked(self):
        """A channel ID not in the list returns False when the list is non-empty."""
        bot = _make_bot([111, 222])
        assert bot.is_allowed_channel(999) is False


class TestPublishCommands:
    @pytest.mark.asyncio
    async def test_global_publish_without_dev_guild(self):
        bot = _make_bot()
        await bot.publish_commands(DEFINITIONS)

        bot.http.bulk_upsert_global_commands.assert_awaited_once_with(
            APPLICATION_ID, [d.to_discord_payload() for d in DEFINITIONS]
        )
        bot.http.bulk_upsert_guild_commands.assert_not_called()

    @pytest.mark.asyncio
    async def test_dev_guild_publish_is_guild_local(self):
        bot = _make_bot(dev_guild_id=42)
        await bot.publish_commands(DEFINITIONS)

        bot.http.bulk_upsert_guild_commands.assert_awaited_once()
        application_id, guild_id, payload = bot.http.bulk_upsert_guild_commands.await_args.args
        assert (application_id, guild_id) == (APPLICATION_ID, 42)
        assert [p["name"] for p in payload] == ["ping", "help"]
        bot.http.bulk_upsert_global_commands.assert_not_called()

    @pytest.mark.asyncio
    async def test_forbidden_names_missing_scope(self):
        bot = _make_bot()
        bot.http.bulk_upsert_global_commands.side_effect = _forbidden()

        with pytest.raises(ReloadError, match="applications.commands"):
            await bot.publish_commands(DEFINITIONS)


class TestCommandTree:
    @pytest.mark.asyncio
    async def test_tree_declines_interactions(self):
        tree = RelayCommandTree.__new__(RelayCommandTree)
        assert await tree.interaction_check(MagicMock(spec=discord.Interaction)) is False
