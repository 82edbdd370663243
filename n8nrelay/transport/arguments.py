"""
Argument binding for both transports.

Slash commands arrive with typed options; prefixed text commands arrive as
one string plus whatever files were attached to the message. Both are
reduced to the same {parameter name: value} mapping:

  - text options become str
  - attachment options become AttachmentRef

For text commands, text parameters bind positionally on whitespace and the
last text parameter takes the rest of the line, so

    !trigger my-workflow {"key": "value"}

binds webhook="my-workflow" and data='{"key": "value"}'.
"""

from __future__ import annotations

from typing import Any, Sequence

import discord

from n8nrelay.commands.base import CommandDefinition, ParameterKind
from n8nrelay.transport.context import AttachmentRef

_CHAT_INPUT = 1


def parse_prefixed(content: str, prefix: str) -> tuple[str, str] | None:
    """
    Split "<prefix><name> <rest>" into (lowercased name, rest).

    Returns None when the text does not start with the prefix or names no
    command.
    """
    if not content.startswith(prefix):
        return None
    parts = content[len(prefix):].strip().split(maxsplit=1)
    if not parts:
        return None
    name = parts[0].lower()
    rest = parts[1].strip() if len(parts) > 1 else ""
    return name, rest


def bind_text_arguments(
    definition: CommandDefinition | None,
    text: str,
    attachments: Sequence[AttachmentRef] = (),
) -> dict[str, Any]:
    """Bind a text command's remainder and attachments to the definition's parameters."""
    if definition is None:
        return {}

    args: dict[str, Any] = {}
    text_params = [p for p in definition.parameters if p.kind is not ParameterKind.ATTACHMENT]
    file_params = [p for p in definition.parameters if p.kind is ParameterKind.ATTACHMENT]

    remaining = text.strip()
    for index, param in enumerate(text_params):
        if not remaining:
            break
        if index == len(text_params) - 1:
            args[param.name] = remaining
            remaining = ""
        else:
            pieces = remaining.split(maxsplit=1)
            args[param.name] = pieces[0]
            remaining = pieces[1] if len(pieces) > 1 else ""

    for param, attachment in zip(file_params, attachments):
        args[param.name] = attachment

    return args


def is_chat_input(interaction: discord.Interaction) -> bool:
    """True for slash command invocations (not context menus, buttons, ...)."""
    if interaction.type is not discord.InteractionType.application_command:
        return False
    data = interaction.data or {}
    return data.get("type", _CHAT_INPUT) == _CHAT_INPUT


def interaction_arguments(interaction: discord.Interaction) -> dict[str, Any]:
    """Read top-level options of a slash command interaction."""
    data = interaction.data or {}
    resolved = data.get("resolved", {}).get("attachments", {})

    args: dict[str, Any] = {}
    for option in data.get("options", []):
        if option.get("type") == ParameterKind.ATTACHMENT:
            attachment = resolved.get(str(option["value"]))
            if attachment is not None:
                args[option["name"]] = AttachmentRef.from_resolved(attachment)
        else:
            args[option["name"]] = option.get("value")
    return args
