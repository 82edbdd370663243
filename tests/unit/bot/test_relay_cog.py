"""
Tests for RelayCog.

Covers:
- Prefixed messages: bot authors, missing prefix and blocked channels are ignored
- Prefixed messages: arguments and attachments are bound and dispatched
- Slash commands: non-chat-input interactions ignored, blocked channel gets an ephemeral notice
- Slash commands: options and origin context are dispatched
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from n8nrelay.bot.cogs.relay import CHANNEL_NOT_ALLOWED, RelayCog
from n8nrelay.commands.builtin.trigger import TriggerCommand
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.transport.replies import InteractionReplySink, MessageReplySink


def _make_bot(allowed=True):
    bot = MagicMock()
    bot.is_allowed_channel.return_value = allowed
    bot.settings.discord.command_prefix = "!"
    bot.registry = CommandRegistry()
    bot.registry.register(TriggerCommand(MagicMock()))
    bot.dispatcher = MagicMock()
    bot.dispatcher.dispatch = AsyncMock()
    return bot


def _make_message(content, is_bot=False, attachments=()):
    message = MagicMock(spec=discord.Message)
    message.content = content
    message.author = MagicMock()
    message.author.bot = is_bot
    message.author.name = "bob"
    message.author.id = 321
    message.channel = MagicMock()
    message.channel.id = 654
    message.guild = None
    message.attachments = list(attachments)
    return message


def _make_interaction(data, channel_id=456):
    interaction = MagicMock(spec=discord.Interaction)
    interaction.type = discord.InteractionType.application_command
    interaction.data = data
    interaction.channel_id = channel_id
    interaction.guild_id = 789
    interaction.user = MagicMock()
    interaction.user.name = "alice"
    interaction.user.id = 123
    interaction.response = MagicMock()
    interaction.response.send_message = AsyncMock()
    return interaction


class TestPrefixedMessages:
    @pytest.mark.asyncio
    async def test_bot_authors_ignored(self):
        bot = _make_bot()
        await RelayCog(bot).on_message(_make_message("!ping", is_bot=True))
        bot.dispatcher.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_messages_without_prefix_ignored(self):
        bot = _make_bot()
        await RelayCog(bot).on_message(_make_message("just chatting"))
        bot.dispatcher.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_blocked_channel_ignored_silently(self):
        bot = _make_bot(allowed=False)
        message = _make_message("!ping")
        await RelayCog(bot).on_message(message)
        bot.dispatcher.dispatch.assert_not_called()
        message.reply.assert_not_called()

    @pytest.mark.asyncio
    async def test_trigger_arguments_bound_and_dispatched(self):
        bot = _make_bot()
        await RelayCog(bot).on_message(_make_message('!TRIGGER my-workflow {"key": "value"}'))

        invocation = bot.dispatcher.dispatch.await_args.args[0]
        assert invocation.command_name == "trigger"
        assert dict(invocation.args) == {"webhook": "my-workflow", "data": '{"key": "value"}'}
        assert isinstance(invocation.reply, MessageReplySink)
        assert invocation.prefix == "!"
        assert invocation.context.message == '!TRIGGER my-workflow {"key": "value"}'
        assert invocation.context.guild_id is None

    @pytest.mark.asyncio
    async def test_unknown_command_still_dispatched(self):
        bot = _make_bot()
        await RelayCog(bot).on_message(_make_message("!nope extra"))

        invocation = bot.dispatcher.dispatch.await_args.args[0]
        assert invocation.command_name == "nope"
        assert dict(invocation.args) == {}


class TestSlashCommands:
    @pytest.mark.asyncio
    async def test_options_and_context_dispatched(self):
        bot = _make_bot()
        interaction = _make_interaction(
            {
                "name": "trigger",
                "type": 1,
                "options": [{"name": "webhook", "type": 3, "value": "my-workflow"}],
            }
        )
        await RelayCog(bot).on_interaction(interaction)

        invocation = bot.dispatcher.dispatch.await_args.args[0]
        assert invocation.command_name == "trigger"
        assert dict(invocation.args) == {"webhook": "my-workflow"}
        assert isinstance(invocation.reply, InteractionReplySink)
        assert invocation.context.command_name == "trigger"
        assert invocation.context.user_id == "123"

    @pytest.mark.asyncio
    async def test_blocked_channel_gets_ephemeral_notice(self):
        bot = _make_bot(allowed=False)
        interaction = _make_interaction({"name": "ping", "type": 1})
        await RelayCog(bot).on_interaction(interaction)

        bot.dispatcher.dispatch.assert_not_called()
        interaction.response.send_message.assert_awaited_once_with(
            CHANNEL_NOT_ALLOWED, ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_component_interactions_ignored(self):
        bot = _make_bot()
        interaction = _make_interaction({"custom_id": "button"})
        interaction.type = discord.InteractionType.component
        await RelayCog(bot).on_interaction(interaction)
        bot.dispatcher.dispatch.assert_not_called()
