"""
reload: rebuild the command set, re-publish it to Discord, then swap it in.

This is the one command whose effect is process-wide, so runs are
serialized on the registry's reload lock; a reload requested while another
is in flight is turned away instead of queued.
"""

from __future__ import annotations

from typing import Iterable

from n8nrelay.commands.base import Command, CommandDefinition, CommandPublisher, Invocation
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.config.logging import get_logger
from n8nrelay.errors import PermissionDeniedError, ReloadError

logger = get_logger(__name__)

RELOADED = "✅ Commands reloaded and re-registered successfully!"
IN_PROGRESS = "⏳ A reload is already in progress."
NOT_ALLOWED = "⛔ You are not allowed to reload commands."


class ReloadCommand(Command):
    """
    Args:
        registry: Registry to rebuild
        publisher: Publishes the rebuilt definitions (the bot client)
        admin_user_ids: If non-empty, only these users may reload
    """

    definition = CommandDefinition(
        name="reload",
        description="Reload all commands and re-register with Discord",
    )

    def __init__(
        self,
        registry: CommandRegistry,
        publisher: CommandPublisher,
        admin_user_ids: Iterable[int] = (),
    ):
        self._registry = registry
        self._publisher = publisher
        self._admin_user_ids = frozenset(str(user_id) for user_id in admin_user_ids)

    async def execute(self, invocation: Invocation) -> None:
        if self._admin_user_ids and invocation.context.user_id not in self._admin_user_ids:
            raise PermissionDeniedError(NOT_ALLOWED)

        lock = self._registry.reload_lock
        if lock.locked():
            await invocation.reply.reply_once(IN_PROGRESS, ephemeral=True)
            return

        async with lock:
            await invocation.reply.defer(ephemeral=True)
            logger.info("Reloading commands...")
            try:
                commands = self._registry.build()
                await self._publisher.publish_commands(
                    [command.definition for command in commands.values()]
                )
            except ReloadError as e:
                # The previous command set stays live, matching Discord's metadata
                logger.error(f"Error reloading commands: {e}")
                await invocation.reply.edit(f"❌ Failed to reload commands: {e}")
                return
            self._registry.install(commands)

        logger.info("Commands reloaded successfully")
        await invocation.reply.edit(RELOADED)
