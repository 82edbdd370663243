"""
Tests for the n8nrelay CLI.

  n8nrelay [--env-file PATH] [--log-level LEVEL] {run,config,commands,trigger}
  n8nrelay trigger WEBHOOK [--data JSON]
"""

import argparse
import json
from unittest.mock import patch

import httpx
import pytest

from n8nrelay.__main__ import cmd_commands, cmd_trigger, create_parser
from n8nrelay.config.settings import Settings
from n8nrelay.webhook.client import WebhookClient


class TestParser:
    """Parser-level tests for the subcommands."""

    def test_trigger_webhook_positional(self):
        """trigger requires a positional WEBHOOK argument."""
        parser = create_parser()
        args = parser.parse_args(["trigger", "my-workflow"])
        assert args.command == "trigger"
        assert args.webhook == "my-workflow"
        assert args.data is None

    def test_trigger_data_option(self):
        parser = create_parser()
        args = parser.parse_args(["trigger", "my-workflow", "--data", '{"a": 1}'])
        assert args.data == '{"a": 1}'

    def test_trigger_requires_webhook(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["trigger"])

    def test_log_level_override(self):
        parser = create_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "config"])
        assert args.log_level == "DEBUG"
        assert args.command == "config"

    def test_invalid_log_level_rejected(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--log-level", "LOUD", "run"])


class TestCommandsCommand:
    def test_prints_slash_command_metadata(self, capsys):
        assert cmd_commands(Settings()) == 0

        payload = json.loads(capsys.readouterr().out)
        assert [c["name"] for c in payload] == [
            "ping",
            "help",
            "trigger",
            "analyse-nutrition",
            "reload",
        ]
        trigger = payload[2]
        assert trigger["type"] == 1
        assert [o["name"] for o in trigger["options"]] == ["webhook", "data"]
        assert trigger["options"][0]["required"] is True
        image = payload[3]["options"][0]
        assert image == {
            "type": 11,
            "name": "image",
            "description": "Image to analyze for nutrition information",
            "required": True,
        }


class TestTriggerCommand:
    @pytest.mark.asyncio
    async def test_invalid_json_returns_1_without_calling(self, capsys):
        args = argparse.Namespace(webhook="my-workflow", data="{not json")
        assert await cmd_trigger(args, Settings()) == 1
        assert "Invalid JSON provided" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_blank_webhook_returns_1(self):
        args = argparse.Namespace(webhook="  ", data=None)
        assert await cmd_trigger(args, Settings()) == 1

    @pytest.mark.asyncio
    async def test_prints_formatted_response(self, capsys):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"status": "ok"})

        client = WebhookClient(base_url="http://n8n:5678", transport=httpx.MockTransport(handler))
        args = argparse.Namespace(webhook="my-workflow", data='{"a": 1}')

        with patch.object(WebhookClient, "from_settings", return_value=client):
            assert await cmd_trigger(args, Settings()) == 0

        body = json.loads(requests[0].content)
        assert body["a"] == 1
        assert body["discord"]["author"] == "n8nrelay-cli"
        assert "Webhook triggered successfully" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_failure_returns_1(self, capsys):
        client = WebhookClient(
            base_url="http://n8n:5678",
            transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"message": "not registered"})),
        )
        args = argparse.Namespace(webhook="missing", data=None)

        with patch.object(WebhookClient, "from_settings", return_value=client):
            assert await cmd_trigger(args, Settings()) == 1

        assert "❌ Failed to trigger webhook: not registered" in capsys.readouterr().err
