"""ping: liveness check, no webhook involved."""

from n8nrelay.commands.base import Command, CommandDefinition, Invocation

PONG = "🏓 Pong!"


class PingCommand(Command):
    definition = CommandDefinition(name="ping", description="Check if the bot is alive")

    async def execute(self, invocation: Invocation) -> None:
        await invocation.reply.reply_once(PONG)
