"""
CommandDispatcher: the boundary between transports and commands.

dispatch() looks the command up, validates its arguments, runs it, and
guarantees the invocation gets exactly one answer:

  - unknown name        -> literal "unknown command" reply (not an error)
  - CommandError        -> its message as the reply (usage, bad JSON, ...)
  - any other exception -> generic apology, full traceback in the log
  - no reply at all     -> a fallback reply, so Discord never times out

Nothing raised by a command propagates past dispatch().
"""

from __future__ import annotations

from n8nrelay.commands.base import Invocation
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.config.logging import get_logger
from n8nrelay.errors import CommandError, UnknownCommandError
from n8nrelay.transport.replies import ReplySink, ReplyState

logger = get_logger(__name__)

GENERIC_ERROR = "❌ An error occurred while processing your command."
FALLBACK_REPLY = "✅ Done."


def unknown_command_reply(prefix: str) -> str:
    return f"❌ Unknown command. Use `{prefix}help` to see available commands."


class CommandDispatcher:
    """Routes invocations to commands in a CommandRegistry."""

    def __init__(self, registry: CommandRegistry):
        self._registry = registry

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    async def dispatch(self, invocation: Invocation) -> None:
        reply = invocation.reply
        name = invocation.command_name

        try:
            command = self._registry.lookup(name)
        except UnknownCommandError:
            logger.info(f"Unknown command {name!r} from {invocation.context.author}")
            await self._respond(reply, unknown_command_reply(reply.prefix))
            return

        logger.info(
            f"{reply.prefix}{command.name} invoked by {invocation.context.author} "
            f"in channel {invocation.context.channel_id}"
        )

        try:
            command.validate(invocation.args, reply.prefix)
            await command.execute(invocation)
        except CommandError as e:
            logger.info(f"{reply.prefix}{command.name} rejected: {e}")
            await self._respond(reply, str(e))
            return
        except Exception:
            logger.exception(f"Error executing command {command.name!r}")
            await self._respond(reply, GENERIC_ERROR)
            return

        if not reply.committed:
            logger.warning(f"Command {command.name!r} finished without replying")
            await self._respond(reply, FALLBACK_REPLY)

    async def _respond(self, reply: ReplySink, text: str) -> None:
        """Send `text` as the reply (or edit); never raises."""
        if reply.state is ReplyState.REPLIED:
            # The single reply is already out; the user saw an acknowledgement
            logger.warning(f"Reply already sent, dropping follow-up: {text!r}")
            return
        try:
            await reply.send(text)
        except Exception:
            logger.exception("Failed to deliver reply to Discord")
