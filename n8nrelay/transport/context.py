"""
Origin context: who sent a command, and where.

The context is forwarded to n8n under the reserved `discord` key of every
webhook body so workflows can reply to the right channel or user. It is
built fresh from each inbound event and never cached.

Wire format (keys as the workflows expect them):

    {"author": "alice", "userId": "123", "channelId": "456",
     "guildId": "789", "commandName": "trigger"}

Message-originated contexts carry "message" (the raw text) instead of
"commandName".
"""

from __future__ import annotations

from typing import Any, Mapping

import discord
from pydantic import BaseModel, ConfigDict, Field

CONTEXT_KEY = "discord"


class OriginContext(BaseModel):
    """Snapshot of the author and location of a single inbound event."""

    author: str = Field(description="Username of the invoking user")
    user_id: str = Field(serialization_alias="userId")
    channel_id: str = Field(serialization_alias="channelId")
    guild_id: str | None = Field(
        None, serialization_alias="guildId", description="None for direct messages"
    )
    command_name: str | None = Field(
        None, serialization_alias="commandName", description="Set for slash commands"
    )
    message: str | None = Field(None, description="Raw text, set for prefixed commands")

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire keys, omitting whichever origin field is unused."""
        exclude = set()
        if self.command_name is None:
            exclude.add("command_name")
        if self.message is None:
            exclude.add("message")
        return self.model_dump(by_alias=True, exclude=exclude)


class AttachmentRef(BaseModel):
    """A file attached to a command, as forwarded to n8n."""

    url: str
    name: str
    size_bytes: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_discord(cls, attachment: discord.Attachment) -> AttachmentRef:
        return cls(url=attachment.url, name=attachment.filename, size_bytes=attachment.size)

    @classmethod
    def from_resolved(cls, data: Mapping[str, Any]) -> AttachmentRef:
        """Build from an entry of interaction.data['resolved']['attachments']."""
        return cls(url=data["url"], name=data["filename"], size_bytes=data.get("size", 0))


def _optional_id(value: int | None) -> str | None:
    return str(value) if value is not None else None


def from_interaction(interaction: discord.Interaction) -> OriginContext:
    """Context for a slash command interaction."""
    data = interaction.data or {}
    return OriginContext(
        author=interaction.user.name,
        user_id=str(interaction.user.id),
        channel_id=str(interaction.channel_id),
        guild_id=_optional_id(interaction.guild_id),
        command_name=data.get("name"),
    )


def from_message(message: discord.Message) -> OriginContext:
    """Context for a prefixed text command."""
    return OriginContext(
        author=message.author.name,
        user_id=str(message.author.id),
        channel_id=str(message.channel.id),
        guild_id=_optional_id(message.guild.id if message.guild else None),
        message=message.content,
    )


def merge_with_payload(payload: Mapping[str, Any], context: OriginContext) -> dict[str, Any]:
    """
    Return a shallow copy of `payload` with the context under the `discord` key.

    The input mapping is not modified. A caller-supplied `discord` key is
    replaced, so the context always reflects the current event.
    """
    merged = dict(payload)
    merged[CONTEXT_KEY] = context.to_payload()
    return merged
