"""
Command layer.

Commands are transport-independent: a transport adapter turns a Discord
interaction or prefixed message into an Invocation, and the
CommandDispatcher routes it to the matching Command in the registry.
"""

from n8nrelay.commands.base import (
    Command,
    CommandDefinition,
    CommandParameter,
    CommandPublisher,
    Invocation,
    ParameterKind,
)
from n8nrelay.commands.dispatcher import CommandDispatcher
from n8nrelay.commands.registry import CommandRegistry

__all__ = [
    "Command",
    "CommandDefinition",
    "CommandDispatcher",
    "CommandParameter",
    "CommandPublisher",
    "CommandRegistry",
    "Invocation",
    "ParameterKind",
]
