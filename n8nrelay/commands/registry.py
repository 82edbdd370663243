"""
CommandRegistry: the live set of commands.

The name-to-command mapping is never mutated in place. register() and
reload() build a new dict and swap it in with a single assignment, so a
dispatch that already looked up its command keeps running against the
mapping it saw, and concurrent lookups see either the old set or the new
one, never a half-built one.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable

from n8nrelay.commands.base import Command, CommandDefinition
from n8nrelay.config.logging import get_logger
from n8nrelay.errors import ConflictError, ReloadError, UnknownCommandError

logger = get_logger(__name__)

CommandFactory = Callable[[], Iterable[Command]]


class CommandRegistry:
    """
    Mapping of command name to Command, with atomic reload.

    Args:
        factory: Builds the standard command set; called by reload()
    """

    def __init__(self, factory: CommandFactory | None = None):
        self._factory = factory
        self._commands: dict[str, Command] = {}
        self._generation = 0
        # Held by the reload command so reloads never overlap
        self.reload_lock = asyncio.Lock()

    @property
    def generation(self) -> int:
        """Incremented every time reload() installs a new mapping."""
        return self._generation

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._commands

    def register(self, command: Command) -> None:
        """
        Add a single command.

        Raises:
            ConflictError: If a command with the same name is already registered
        """
        if command.name in self._commands:
            raise ConflictError(f"Command {command.name!r} is already registered")
        commands = dict(self._commands)
        commands[command.name] = command
        self._commands = commands

    def lookup(self, name: str) -> Command:
        """
        Return the command registered under `name` (case-insensitive).

        Raises:
            UnknownCommandError: If no such command exists
        """
        try:
            return self._commands[name.lower()]
        except KeyError:
            raise UnknownCommandError(name) from None

    def get(self, name: str) -> Command | None:
        return self._commands.get(name.lower())

    def list(self) -> list[CommandDefinition]:
        """Definitions in registration order, for help text and metadata export."""
        return [command.definition for command in self._commands.values()]

    def names(self) -> list[str]:
        return list(self._commands)

    def build(self) -> dict[str, Command]:
        """
        Build a fresh name-to-command mapping from the factory without installing it.

        Raises:
            ReloadError: If the factory raises or yields duplicate names
        """
        if self._factory is None:
            raise ReloadError("No command factory configured")

        try:
            built = list(self._factory())
        except Exception as e:
            raise ReloadError(f"Failed to build commands: {e}") from e

        commands: dict[str, Command] = {}
        for command in built:
            if command.name in commands:
                raise ReloadError(f"Duplicate command name {command.name!r}")
            commands[command.name] = command
        return commands

    def install(self, commands: dict[str, Command]) -> list[CommandDefinition]:
        """Make a mapping from build() live with a single assignment."""
        self._commands = dict(commands)
        self._generation += 1
        logger.info(f"Loaded {len(commands)} commands: {', '.join(commands)}")
        return self.list()

    def reload(self) -> list[CommandDefinition]:
        """
        Rebuild the command set from the factory and swap it in.

        All-or-nothing: if the factory raises or yields duplicate names,
        the current mapping stays live.

        Returns:
            The definitions now registered

        Raises:
            ReloadError: If the new command set could not be built
        """
        return self.install(self.build())
