"""
Discord Bot Layer.

Owns the discord.py client: lifecycle, event listeners, and publishing
slash command metadata for the relay.
"""

from n8nrelay.bot.client import RelayBot

__all__ = ["RelayBot"]
