"""Command base class and function-based command factory."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Tuple, Type

import discord

from .arguments import Argument
from .permissions import PermissionPolicy

if TYPE_CHECKING:
    from disbot.clients.disc import DisBot

__all__ = ["Command", "command", "option_values"]


def _as_arguments(arguments: Argument | Iterable[Argument] | None) -> Tuple[Argument, ...]:
    if arguments is None:
        return ()
    if isinstance(arguments, Argument):
        return (arguments,)
    return tuple(arguments)


class Command(abc.ABC):
    """
    Base class for slash commands.

    Subclasses set the class attributes and implement :meth:`execute`::

        class Ping(Command):
            name = "ping"
            description = "Check the bot is alive"

            async def execute(self, bot, interaction):
                await interaction.response.send_message("Pong!")
                return True

        COMMAND = Ping

    ``arguments`` may be a single :class:`Argument` or a sequence of them;
    their order is the option order shown in Discord.
    """

    name: str = ""
    description: str = ""
    permission: PermissionPolicy | None = None
    arguments: Argument | Iterable[Argument] | None = ()

    def __init__(
        self,
        name: str | None = None,
        description: str | None = None,
        permission: PermissionPolicy | None = None,
        arguments: Argument | Iterable[Argument] | None = None,
    ) -> None:
        cls = type(self)
        self.name = name if name is not None else cls.name
        self.description = description if description is not None else cls.description
        self.permission = permission if permission is not None else cls.permission
        self.arguments = _as_arguments(arguments if arguments is not None else cls.arguments)

    @abc.abstractmethod
    async def execute(self, bot: "DisBot", interaction: discord.Interaction) -> bool:
        """
        Run the command for ``interaction``.

        :param bot: The running bot.
        :param interaction: Interaction that invoked the command.
        :returns: ``True`` when the command completed successfully.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} arguments={len(self.arguments)}>"


CommandCallback = Callable[["DisBot", discord.Interaction], Awaitable[bool]]


def command(
    name: str,
    description: str,
    *,
    permission: PermissionPolicy | None = None,
    arguments: Argument | Iterable[Argument] | None = (),
) -> Callable[[CommandCallback], Type[Command]]:
    """
    Decorator turning an async function into a :class:`Command` subclass.

    The decorated name is bound to the generated class, so a module can
    export it directly as ``COMMAND``.
    """

    def decorator(func: CommandCallback) -> Type[Command]:
        async def execute(self: Command, bot: Any, interaction: discord.Interaction) -> bool:
            return await func(bot, interaction)

        attrs = {
            "name": name,
            "description": description,
            "permission": permission,
            "arguments": _as_arguments(arguments),
            "execute": execute,
            "__doc__": func.__doc__,
            "__module__": func.__module__,
        }
        return type(func.__name__, (Command,), attrs)

    return decorator


def option_values(interaction: Any) -> dict[str, Any]:
    """Return ``{option_name: value}`` from the raw interaction payload."""

    data = getattr(interaction, "data", None) or {}
    return {opt["name"]: opt.get("value") for opt in data.get("options", ()) if "name" in opt}
