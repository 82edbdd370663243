"""
The standard command set.

standard_commands() is the factory the registry re-runs on /reload; adding
a command means writing a Command subclass and listing it here.
"""

from __future__ import annotations

from dataclasses import dataclass

from n8nrelay.commands.base import Command, CommandPublisher
from n8nrelay.commands.builtin.help import HelpCommand
from n8nrelay.commands.builtin.nutrition import AnalyseNutritionCommand
from n8nrelay.commands.builtin.ping import PingCommand
from n8nrelay.commands.builtin.reload import ReloadCommand
from n8nrelay.commands.builtin.trigger import TriggerCommand
from n8nrelay.commands.registry import CommandRegistry
from n8nrelay.config.settings import Settings
from n8nrelay.webhook.client import WebhookClient


@dataclass
class CommandServices:
    """Shared dependencies handed to commands when they are built."""

    webhook: WebhookClient
    settings: Settings
    publisher: CommandPublisher


def standard_commands(services: CommandServices, registry: CommandRegistry) -> list[Command]:
    return [
        PingCommand(),
        HelpCommand(registry),
        TriggerCommand(services.webhook),
        AnalyseNutritionCommand(services.webhook, services.settings.n8n.nutrition_webhook),
        ReloadCommand(
            registry,
            services.publisher,
            admin_user_ids=services.settings.discord.admin_user_ids,
        ),
    ]


def build_registry(services: CommandServices) -> CommandRegistry:
    """
    Create a registry whose reload() rebuilds the standard commands, and load it.

    Raises:
        ReloadError: If the initial command set cannot be built
    """
    registry = CommandRegistry(factory=lambda: standard_commands(services, registry))
    registry.reload()
    return registry


__all__ = [
    "AnalyseNutritionCommand",
    "CommandServices",
    "HelpCommand",
    "PingCommand",
    "ReloadCommand",
    "TriggerCommand",
    "build_registry",
    "standard_commands",
]
