"""
n8nrelay CLI entry point.

Provides command-line interface for running the bot and utility commands.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from n8nrelay import __version__
from n8nrelay.config.logging import get_logger, setup_logging
from n8nrelay.config.settings import Settings, load_settings


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="n8nrelay",
        description="Discord bot relaying slash and prefixed commands to n8n webhooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"n8nrelay {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("run", help="Run the Discord bot")

    subparsers.add_parser("config", help="Show current configuration")

    subparsers.add_parser(
        "commands",
        help="Print the slash command metadata that would be published to Discord",
    )

    trigger_parser = subparsers.add_parser(
        "trigger",
        help="Send one webhook call to n8n and print the response",
    )
    trigger_parser.add_argument(
        "webhook",
        help="Webhook path, e.g. my-workflow",
    )
    trigger_parser.add_argument(
        "--data",
        default=None,
        help='JSON object to send, e.g. \'{"key": "value"}\'',
    )

    return parser


class _OfflinePublisher:
    """Publisher for CLI use, where no Discord connection exists."""

    async def publish_commands(self, definitions) -> None:
        from n8nrelay.errors import ReloadError

        raise ReloadError("Publishing commands requires a running bot")


def _build_offline_registry(settings: Settings):
    from n8nrelay.commands.builtin import CommandServices, build_registry
    from n8nrelay.webhook.client import WebhookClient

    services = CommandServices(
        webhook=WebhookClient.from_settings(settings.n8n),
        settings=settings,
        publisher=_OfflinePublisher(),
    )
    return build_registry(services)


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== n8nrelay Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"\nBot Name: {settings.discord.name}")
    logger.info(f"Discord Token: {'Set' if settings.discord.token else 'Not set'}")
    logger.info(f"Command Prefix: {settings.discord.command_prefix}")
    logger.info(f"Dev Guild: {settings.discord.dev_guild_id or 'None (global commands)'}")
    logger.info(f"Allowed Channels: {settings.discord.allowed_channel_ids or 'All'}")
    logger.info(f"Reload Admins: {settings.discord.admin_user_ids or 'Anyone'}")
    logger.info(f"\nn8n Base URL: {settings.n8n.base_url}")
    logger.info(f"n8n API Key: {'Set' if settings.n8n.api_key else 'Not set'}")
    logger.info(f"n8n Timeout: {settings.n8n.timeout:g}s")
    logger.info(f"Nutrition Webhook: {settings.n8n.nutrition_webhook}")

    return 0


def cmd_commands(settings: Settings) -> int:
    """Print command metadata as JSON."""
    registry = _build_offline_registry(settings)
    payload = [definition.to_discord_payload() for definition in registry.list()]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


async def cmd_trigger(args, settings: Settings) -> int:
    """
    Send a single webhook call, the same way /trigger does.

    The origin context identifies the CLI instead of a Discord user.
    """
    from n8nrelay.commands.builtin.trigger import parse_payload
    from n8nrelay.errors import InvalidPayloadError
    from n8nrelay.transport.context import OriginContext, merge_with_payload
    from n8nrelay.webhook.client import WebhookClient
    from n8nrelay.webhook.formatting import format_webhook_error, format_webhook_reply

    logger = get_logger(__name__)

    try:
        payload = parse_payload(args.data, "n8nrelay trigger <webhook> --data '<json>'")
    except InvalidPayloadError as e:
        print(e, file=sys.stderr)
        return 1

    context = OriginContext(
        author="n8nrelay-cli",
        user_id="0",
        channel_id="0",
        command_name="trigger",
    )

    async with WebhookClient.from_settings(settings.n8n) as client:
        try:
            url = client.build_url(args.webhook)
        except ValueError as e:
            logger.error(str(e))
            return 1
        logger.info(f"POST {url}")
        result = await client.send(args.webhook, merge_with_payload(payload, context))

    if result.ok:
        print(format_webhook_reply(result.text))
        return 0
    print(format_webhook_error(result.error), file=sys.stderr)
    return 1


def cmd_run(settings: Settings) -> int:
    """Start the Discord bot."""
    logger = get_logger(__name__)

    if not settings.discord.token:
        logger.error(
            "Discord bot token not set. Add DISCORD_TOKEN=<your-token> to your .env file."
        )
        return 1

    if not settings.n8n.api_key:
        logger.info("N8N_API_KEY not set; webhook calls are sent without an API key header.")

    from n8nrelay.bot import RelayBot

    bot = RelayBot(settings)
    logger.info(f"Starting {settings.discord.name}...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(settings.discord.token, log_handler=None)
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings; invalid configuration is fatal before anything starts
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    setup_logging(settings)

    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "run":
        return cmd_run(settings)
    elif args.command == "commands":
        return cmd_commands(settings)
    elif args.command == "trigger":
        return asyncio.run(cmd_trigger(args, settings))
    else:
        # Default: show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
