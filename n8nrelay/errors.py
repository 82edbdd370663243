"""
Exception hierarchy for the relay.

CommandError subclasses carry the exact text shown to the user; the
dispatcher replies with str(error) and does not log them as failures.
Everything else that escapes a command is an internal error.
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class CommandError(RelayError):
    """A user-facing command failure. The message is the reply text."""


class UsageError(CommandError):
    """A required argument is missing or malformed."""

    def __init__(self, usage: str):
        self.usage = usage
        super().__init__(f"❌ Usage: `{usage}`")


class InvalidPayloadError(CommandError):
    """The JSON data argument could not be used as a webhook payload."""


class PermissionDeniedError(CommandError):
    """The invoking user may not run this command."""


class TransportError(RelayError):
    """The webhook call failed: non-2xx status, timeout or connection error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ConflictError(RelayError):
    """A command with the same name is already registered."""


class UnknownCommandError(RelayError, LookupError):
    """No command is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown command: {name!r}")


class ReloadError(RelayError):
    """Rebuilding the command set or re-publishing its metadata failed."""


class ReplyStateError(RelayError, RuntimeError):
    """A reply sink was used out of order (e.g. reply after defer)."""
