"""
ReplySink: one reply per inbound command, whatever the transport.

Commands answer through a sink instead of touching Discord objects, so the
same handler serves slash commands and prefixed text commands. A sink moves
through a small state machine:

    FRESH --reply_once/acknowledge--> REPLIED
    FRESH --defer--> DEFERRED --edit--> EDITED --edit--> EDITED

Any other transition is a programming error and raises ReplyStateError
before anything is sent to Discord.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import discord

from n8nrelay.errors import ReplyStateError
from n8nrelay.webhook.formatting import truncate_text

SLASH_PREFIX = "/"


class ReplyState(str, Enum):
    FRESH = "fresh"
    REPLIED = "replied"
    DEFERRED = "deferred"
    EDITED = "edited"


class ReplySink(ABC):
    """
    Transport-independent reply channel for a single inbound command.

    Subclasses implement the three raw operations; the public methods
    enforce the ordering rules and clip text to Discord's message limit.
    """

    #: Prefix users type before command names on this transport ("/" or "!")
    prefix: str = SLASH_PREFIX

    def __init__(self) -> None:
        self._state = ReplyState.FRESH

    @property
    def state(self) -> ReplyState:
        return self._state

    @property
    def committed(self) -> bool:
        """True once a reply or a deferral has been sent."""
        return self._state is not ReplyState.FRESH

    def _require(self, *allowed: ReplyState, action: str) -> None:
        if self._state not in allowed:
            raise ReplyStateError(f"cannot {action} a reply in state {self._state.value!r}")

    async def reply_once(self, text: str, ephemeral: bool = False) -> None:
        """Send the one and only reply for this command."""
        self._require(ReplyState.FRESH, action="send")
        await self._send_reply(truncate_text(text), ephemeral)
        self._state = ReplyState.REPLIED

    async def acknowledge(self, text: str, ephemeral: bool = False) -> None:
        """
        Reply immediately before slow work that reports back elsewhere.

        Same transition as reply_once(); used by fire-and-forget commands
        whose result is posted later by the workflow itself.
        """
        await self.reply_once(text, ephemeral=ephemeral)

    async def defer(self, ephemeral: bool = False) -> None:
        """Acknowledge now and promise a reply via edit() later."""
        self._require(ReplyState.FRESH, action="defer")
        await self._send_defer(ephemeral)
        self._state = ReplyState.DEFERRED

    async def edit(self, text: str) -> None:
        """Replace the deferred reply's content."""
        self._require(ReplyState.DEFERRED, ReplyState.EDITED, action="edit")
        await self._send_edit(truncate_text(text))
        self._state = ReplyState.EDITED

    async def defer_then_edit(self, text: str) -> None:
        if self._state is ReplyState.FRESH:
            await self.defer()
        await self.edit(text)

    async def send(self, text: str) -> None:
        """Reply if nothing was sent yet, otherwise edit the deferred reply."""
        if self._state is ReplyState.FRESH:
            await self.reply_once(text)
        else:
            await self.edit(text)

    @abstractmethod
    async def _send_reply(self, text: str, ephemeral: bool) -> None:
        ...

    @abstractmethod
    async def _send_defer(self, ephemeral: bool) -> None:
        ...

    @abstractmethod
    async def _send_edit(self, text: str) -> None:
        ...


class InteractionReplySink(ReplySink):
    """Replies to a slash command through the interaction response API."""

    prefix = SLASH_PREFIX

    def __init__(self, interaction: discord.Interaction) -> None:
        super().__init__()
        self._interaction = interaction

    async def _send_reply(self, text: str, ephemeral: bool) -> None:
        await self._interaction.response.send_message(text, ephemeral=ephemeral)

    async def _send_defer(self, ephemeral: bool) -> None:
        await self._interaction.response.defer(ephemeral=ephemeral)

    async def _send_edit(self, text: str) -> None:
        await self._interaction.edit_original_response(content=text)


class MessageReplySink(ReplySink):
    """
    Replies to a prefixed text command with message replies.

    Plain messages have no deferral concept: defer() only shows a typing
    indicator, and the first edit() posts the reply. Later edits modify
    that reply in place. Ephemeral flags are ignored.
    """

    def __init__(self, message: discord.Message, prefix: str) -> None:
        super().__init__()
        self._message = message
        self.prefix = prefix
        self._sent: discord.Message | None = None

    async def _send_reply(self, text: str, ephemeral: bool) -> None:
        self._sent = await self._message.reply(text)

    async def _send_defer(self, ephemeral: bool) -> None:
        await self._message.channel.typing()

    async def _send_edit(self, text: str) -> None:
        if self._sent is None:
            self._sent = await self._message.reply(text)
        else:
            await self._sent.edit(content=text)
