"""Shared fixtures for the unit tests."""

from __future__ import annotations

import pytest

from n8nrelay.commands.base import Invocation
from n8nrelay.transport.context import OriginContext
from tests.fakes import RecordingSink


@pytest.fixture
def origin_context() -> OriginContext:
    return OriginContext(
        author="alice",
        user_id="1001",
        channel_id="2002",
        guild_id="3003",
        command_name="trigger",
    )


@pytest.fixture
def make_invocation(origin_context):
    """Build an Invocation with a fresh RecordingSink."""

    def _make(name: str, args: dict | None = None, prefix: str = "/", context=None) -> Invocation:
        return Invocation(
            command_name=name,
            args=args or {},
            context=context or origin_context,
            reply=RecordingSink(prefix=prefix),
        )

    return _make
