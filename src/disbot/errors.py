"""Error taxonomy shared by the loader, registrar sync and dispatcher."""

from __future__ import annotations


class DisbotError(Exception):
    """Base class for every error raised by this package."""


class LoadError(DisbotError):
    """A single command artifact could not be turned into a command."""

    def __init__(self, artifact: str, reason: str) -> None:
        super().__init__(f"{artifact}: {reason}")
        self.artifact = artifact
        self.reason = reason


class ConfigurationError(DisbotError):
    """Required settings (application id, token) are missing."""


class RegistrationError(DisbotError):
    """The remote command registrar rejected or never received a payload."""

    def __init__(self, guild_id: int | str, message: str, *, status: int | None = None) -> None:
        super().__init__(f"guild {guild_id}: {message}")
        self.guild_id = guild_id
        self.status = status


class UnknownCommandError(DisbotError):
    """An interaction named a command that is not in the registry."""


class AuthorizationError(DisbotError):
    """The invoking user does not satisfy the command's permission policy."""


class ExecutionFault(DisbotError):
    """A command body raised while handling an interaction."""

    def __init__(self, command_name: str, cause: BaseException) -> None:
        super().__init__(f"Command '{command_name}' failed: {cause}")
        self.command_name = command_name
        self.__cause__ = cause


__all__ = [
    "DisbotError",
    "LoadError",
    "ConfigurationError",
    "RegistrationError",
    "UnknownCommandError",
    "AuthorizationError",
    "ExecutionFault",
]
