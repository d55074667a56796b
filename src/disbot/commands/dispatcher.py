"""Route incoming slash-command interactions to registered commands."""

from __future__ import annotations

import enum
import logging
from typing import Any

import discord

from disbot.errors import AuthorizationError, ExecutionFault, UnknownCommandError

from .base import Command
from .registry import CommandRegistry

logger = logging.getLogger(__name__)

__all__ = ["DispatchState", "Dispatcher", "interaction_command_name"]

UNKNOWN_REPLY = "Unknown command."
DENIED_REPLY = "You are not allowed to use this command."
FAILURE_REPLY = "Something went wrong while running this command."


class DispatchState(enum.Enum):
    """Lifecycle of one interaction; the last four members are terminal."""

    RECEIVED = "received"
    RESOLVED = "resolved"
    AUTHORIZED = "authorized"
    UNKNOWN = "unknown"
    DENIED = "denied"
    EXECUTED = "executed"
    FAULTED = "faulted"


def interaction_command_name(interaction: Any) -> str | None:
    """Return the invoked command name from the raw payload or the resolved command."""

    data = getattr(interaction, "data", None) or {}
    name = data.get("name") if isinstance(data, dict) else None
    if name:
        return name
    cmd = getattr(interaction, "command", None)
    return getattr(cmd, "name", None)


async def _reply(interaction: Any, content: str) -> None:
    """Send an ephemeral reply, falling back to a followup once responded."""

    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as exc:
        logger.warning("Failed to reply to interaction %s: %s", getattr(interaction, "id", "?"), exc)


class Dispatcher:
    """
    Resolve, authorize and execute commands for interactions.

    Every outcome other than a successful execution produces an ephemeral
    reply, so users never see an interaction silently time out.
    """

    def __init__(self, bot: Any, registry: CommandRegistry) -> None:
        self.bot = bot
        self.registry = registry

    def resolve(self, name: str | None) -> Command:
        cmd = self.registry.get(name) if name else None
        if cmd is None:
            raise UnknownCommandError(f"Unknown command '{name}'")
        return cmd

    @staticmethod
    def authorize(cmd: Command, user: Any) -> None:
        if cmd.permission is not None and not cmd.permission.check(user):
            raise AuthorizationError(
                f"User {getattr(user, 'id', '?')} may not use command '{cmd.name}'"
            )

    async def dispatch(self, interaction: discord.Interaction) -> DispatchState:
        """
        Handle one interaction.

        :returns: The terminal :class:`DispatchState` reached.
        """

        name = interaction_command_name(interaction)
        user = getattr(interaction, "user", None)
        logger.debug("Interaction %s received for command '%s'", getattr(interaction, "id", "?"), name)

        try:
            cmd = self.resolve(name)
        except UnknownCommandError as exc:
            logger.info("%s (user %s)", exc, getattr(user, "id", "?"))
            await _reply(interaction, UNKNOWN_REPLY)
            return DispatchState.UNKNOWN

        try:
            self.authorize(cmd, user)
        except AuthorizationError as exc:
            logger.info("%s", exc)
            await _reply(interaction, DENIED_REPLY)
            return DispatchState.DENIED

        logger.info("Dispatching command '%s' for user %s", cmd.name, getattr(user, "id", "?"))
        try:
            ok = await cmd.execute(self.bot, interaction)
        except Exception as exc:
            fault = ExecutionFault(cmd.name, exc)
            logger.exception("%s (interaction %s)", fault, getattr(interaction, "id", "?"))
            await _reply(interaction, FAILURE_REPLY)
            return DispatchState.FAULTED

        if not ok:
            logger.warning("Command '%s' reported failure", cmd.name)
            if not interaction.response.is_done():
                await _reply(interaction, FAILURE_REPLY)

        return DispatchState.EXECUTED
