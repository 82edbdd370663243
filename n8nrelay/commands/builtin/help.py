"""
help: usage text for every registered command.

The command list is rendered from the registry's definitions, so it always
matches what the bot actually serves, with the prefix of the transport the
user typed on ("/" for slash commands, the configured prefix for text).
"""

from __future__ import annotations

from n8nrelay.commands.base import Command, CommandDefinition, Invocation
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.transport.replies import SLASH_PREFIX

HEADER = "📚 **Discord Bot - n8n Integration**"


def render_help(registry: CommandRegistry, prefix: str) -> str:
    definitions = registry.list()

    lines = [HEADER, "", "**Available Commands:**"]
    for definition in definitions:
        lines.append(f"`{prefix}{definition.name}` - {definition.description}")
        for param in definition.parameters:
            requirement = "required" if param.required else "optional"
            lines.append(f"  - `{param.name}` ({requirement}): {param.description}")

    lines += ["", "**Examples:**"]
    if prefix == SLASH_PREFIX:
        lines.append('`/trigger webhook:my-workflow data:{"key": "value"}`')
        lines.append("`/analyse-nutrition image:<upload> message:optional context`")
    else:
        lines.append(f"`{prefix}trigger my-workflow`")
        lines.append(f'`{prefix}trigger my-workflow {{"key": "value"}}`')
        lines.append(f"`{prefix}analyse-nutrition optional context` (with an image attached)")

    lines += ["", "Your Discord user and channel are passed to each workflow as context."]
    return "\n".join(lines)


class HelpCommand(Command):
    definition = CommandDefinition(name="help", description="Show available commands and usage")

    def __init__(self, registry: CommandRegistry):
        self._registry = registry

    async def execute(self, invocation: Invocation) -> None:
        await invocation.reply.reply_once(render_help(self._registry, invocation.prefix))
