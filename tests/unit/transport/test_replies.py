"""
Tests for ReplySink state rules and the two Discord adapters.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from n8nrelay.errors import ReplyStateError
from n8nrelay.transport.replies import (
    InteractionReplySink,
    MessageReplySink,
    ReplyState,
)
from tests.fakes import RecordingSink


class TestReplyStateMachine:
    @pytest.mark.asyncio
    async def test_reply_once_then_reply_again_fails_fast(self):
        sink = RecordingSink()
        await sink.reply_once("first")
        with pytest.raises(ReplyStateError):
            await sink.reply_once("second")
        assert sink.texts == ["first"]

    @pytest.mark.asyncio
    async def test_acknowledge_after_defer_fails_fast(self):
        sink = RecordingSink()
        await sink.defer()
        with pytest.raises(ReplyStateError):
            await sink.acknowledge("too late")
        assert sink.state is ReplyState.DEFERRED

    @pytest.mark.asyncio
    async def test_edit_without_defer_fails_fast(self):
        sink = RecordingSink()
        with pytest.raises(ReplyStateError):
            await sink.edit("nothing to edit")
        assert sink.events == []

    @pytest.mark.asyncio
    async def test_defer_then_edit(self):
        sink = RecordingSink()
        await sink.defer_then_edit("done")
        assert sink.events == [("defer", False), ("edit", "done")]
        assert sink.state is ReplyState.EDITED

    @pytest.mark.asyncio
    async def test_send_picks_reply_or_edit(self):
        fresh = RecordingSink()
        await fresh.send("hello")
        assert fresh.events == [("reply", "hello")]

        deferred = RecordingSink()
        await deferred.defer()
        await deferred.send("hello")
        assert deferred.events[-1] == ("edit", "hello")

    @pytest.mark.asyncio
    async def test_long_text_is_clipped(self):
        sink = RecordingSink()
        await sink.reply_once("x" * 2500)
        assert len(sink.texts[0]) == 2000


class TestInteractionReplySink:
    def _make_interaction(self):
        interaction = MagicMock(spec=discord.Interaction)
        interaction.response = MagicMock()
        interaction.response.send_message = AsyncMock()
        interaction.response.defer = AsyncMock()
        interaction.edit_original_response = AsyncMock()
        return interaction

    @pytest.mark.asyncio
    async def test_reply_uses_response_send_message(self):
        interaction = self._make_interaction()
        sink = InteractionReplySink(interaction)
        await sink.reply_once("🏓 Pong!", ephemeral=True)
        interaction.response.send_message.assert_awaited_once_with("🏓 Pong!", ephemeral=True)

    @pytest.mark.asyncio
    async def test_defer_then_edit_original_response(self):
        interaction = self._make_interaction()
        sink = InteractionReplySink(interaction)
        await sink.defer(ephemeral=True)
        await sink.edit("result")
        interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        interaction.edit_original_response.assert_awaited_once_with(content="result")

    def test_prefix_is_slash(self):
        assert InteractionReplySink(self._make_interaction()).prefix == "/"


class TestMessageReplySink:
    def _make_message(self):
        message = MagicMock(spec=discord.Message)
        message.channel = MagicMock()
        message.channel.typing = AsyncMock()
        sent = MagicMock()
        sent.edit = AsyncMock()
        message.reply = AsyncMock(return_value=sent)
        return message, sent

    @pytest.mark.asyncio
    async def test_reply_once_replies_to_message(self):
        message, _ = self._make_message()
        sink = MessageReplySink(message, "!")
        await sink.reply_once("hi")
        message.reply.assert_awaited_once_with("hi")

    @pytest.mark.asyncio
    async def test_defer_shows_typing_and_first_edit_replies(self):
        message, sent = self._make_message()
        sink = MessageReplySink(message, "!")
        await sink.defer()
        message.channel.typing.assert_awaited_once()
        message.reply.assert_not_called()

        await sink.edit("result")
        message.reply.assert_awaited_once_with("result")

        await sink.edit("updated")
        sent.edit.assert_awaited_once_with(content="updated")

    def test_prefix_is_configured_prefix(self):
        message, _ = self._make_message()
        assert MessageReplySink(message, "?").prefix == "?"
