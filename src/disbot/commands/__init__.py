"""
Command framework: argument model, schema compiler, permission policies,
registry, loader, registrar sync and dispatcher.

Command modules live in a package (``disbot.commands.builtin`` by default)
and export their class as ``COMMAND``::

    from disbot.commands import Argument, ArgumentType, Command

    class Echo(Command):
        name = "echo"
        description = "Repeat some text"
        arguments = Argument(ArgumentType.STRING, "text", "What to repeat")

        async def execute(self, bot, interaction):
            ...

    COMMAND = Echo

NOTE: Subcommands and subcommand groups are not supported.
"""

from __future__ import annotations

from .arguments import Argument, ArgumentType
from .base import Command, command, option_values
from .dispatcher import Dispatcher, DispatchState
from .loader import CommandLoader, CommandSource, ManifestSource, PackageSource
from .permissions import PermissionPolicy
from .registry import CommandRegistry
from .schema import SchemaError, compile_command, compile_registry
from .sync import CommandRegistrar, HttpRegistrar, sync_all, sync_guild

__all__ = [
    "Argument",
    "ArgumentType",
    "Command",
    "CommandLoader",
    "CommandRegistrar",
    "CommandRegistry",
    "CommandSource",
    "DispatchState",
    "Dispatcher",
    "HttpRegistrar",
    "ManifestSource",
    "PackageSource",
    "PermissionPolicy",
    "SchemaError",
    "command",
    "compile_command",
    "compile_registry",
    "option_values",
    "sync_all",
    "sync_guild",
]
