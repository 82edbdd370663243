"""
Core command types.

- ParameterKind: option types, valued as Discord application-command option types
- CommandParameter: one typed option of a command
- CommandDefinition: name, description and parameters, exportable as Discord metadata
- Invocation: a single inbound command, already normalized by a transport adapter
- Command: abstract base class every command implements
- CommandPublisher: anything that can publish definitions to Discord
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from n8nrelay.errors import UsageError

if TYPE_CHECKING:
    from n8nrelay.transport.context import OriginContext
    from n8nrelay.transport.replies import ReplySink

# Discord's rule for CHAT_INPUT command and option names (lowercase only)
_NAME_RE = re.compile(r"^[-_a-z0-9]{1,32}$")


class ParameterKind(IntEnum):
    """Option types; values match Discord's ApplicationCommandOptionType."""

    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    ATTACHMENT = 11


class CommandParameter(BaseModel):
    """A single typed option of a command."""

    name: str = Field(description="Option name, lowercase")
    kind: ParameterKind = Field(default=ParameterKind.STRING)
    required: bool = Field(default=False)
    description: str = Field(min_length=1, max_length=100)

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not _NAME_RE.match(value):
            raise ValueError(f"invalid option name {value!r}")
        return value

    @property
    def hint(self) -> str:
        return f"<{self.name}>" if self.required else f"[{self.name}]"

    def to_discord_payload(self) -> dict[str, Any]:
        return {
            "type": int(self.kind),
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


class CommandDefinition(BaseModel):
    """
    Immutable description of a command.

    The name is the stable, unique registry key. `usage_hint` overrides the
    argument hint derived from the parameters when a friendlier form exists
    (e.g. "<webhook-path> [json-data]").
    """

    name: str
    description: str = Field(min_length=1, max_length=100)
    parameters: tuple[CommandParameter, ...] = ()
    usage_hint: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not _NAME_RE.match(value):
            raise ValueError(f"invalid command name {value!r} (lowercase, 1-32 chars)")
        return value

    @model_validator(mode="after")
    def _check_parameters(self) -> CommandDefinition:
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate parameter names in {self.name!r}")
        seen_optional = False
        for param in self.parameters:
            if param.required and seen_optional:
                # Discord rejects required options that follow optional ones
                raise ValueError(f"required parameter {param.name!r} follows an optional one")
            seen_optional = seen_optional or not param.required
        return self

    @property
    def usage(self) -> str:
        """Name plus argument hint, without the transport prefix."""
        hint = self.usage_hint
        if hint is None:
            hint = " ".join(p.hint for p in self.parameters)
        return f"{self.name} {hint}".strip()

    def get_parameter(self, name: str) -> CommandParameter | None:
        return next((p for p in self.parameters if p.name == name), None)

    def to_discord_payload(self) -> dict[str, Any]:
        """Render as a CHAT_INPUT application command for Discord's REST API."""
        payload: dict[str, Any] = {
            "type": 1,
            "name": self.name,
            "description": self.description,
        }
        if self.parameters:
            payload["options"] = [p.to_discord_payload() for p in self.parameters]
        return payload


@dataclass(frozen=True)
class Invocation:
    """
    One inbound command, independent of the transport it arrived on.

    `args` maps parameter names to values: str for text options,
    AttachmentRef for attachments. Absent options are simply missing.
    """

    command_name: str
    args: Mapping[str, Any]
    context: OriginContext
    reply: ReplySink

    @property
    def prefix(self) -> str:
        return self.reply.prefix

    def get_text(self, name: str) -> str:
        """Return a text argument stripped of whitespace, or "" when absent."""
        value = self.args.get(name)
        return value.strip() if isinstance(value, str) else ""


class Command(ABC):
    """
    Base class for relay commands.

    Subclasses set `definition` and implement execute(). Commands report
    user mistakes by raising CommandError subclasses; the dispatcher turns
    those into replies.
    """

    definition: CommandDefinition

    @property
    def name(self) -> str:
        return self.definition.name

    def usage_for(self, prefix: str) -> str:
        return f"{prefix}{self.definition.usage}"

    def validate(self, args: Mapping[str, Any], prefix: str) -> None:
        """
        Check arguments before execute() runs.

        Raises:
            UsageError: If a required parameter is missing or blank
        """
        for param in self.definition.parameters:
            if not param.required:
                continue
            value = args.get(param.name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise UsageError(self.usage_for(prefix))

    @abstractmethod
    async def execute(self, invocation: Invocation) -> None:
        """
        Run the command and answer through invocation.reply.

        Args:
            invocation: Normalized command with arguments, origin context and reply sink
        """


class CommandPublisher(Protocol):
    """Publishes command metadata to the chat platform."""

    async def publish_commands(self, definitions: Sequence[CommandDefinition]) -> None:
        ...
