"""
n8nrelay - Discord bot that relays chat commands to n8n webhooks.

This package receives slash commands and prefixed text commands from Discord,
turns them into webhook calls against an n8n instance, and relays the
workflow's response (or an acknowledgement) back to the channel.
"""

__version__ = "0.1.0"
