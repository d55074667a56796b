"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

import discord

from disbot.commands import (
    CommandLoader,
    CommandRegistrar,
    CommandRegistry,
    CommandSource,
    Dispatcher,
    HttpRegistrar,
    ManifestSource,
    PackageSource,
    sync_all,
)
from disbot.config import core, sync
from disbot.event_hooks import interaction_hook, ready_hook

logger = logging.getLogger(__name__)


def default_source() -> CommandSource:
    """Command source described by the configuration."""

    if core.COMMAND_MANIFEST:
        return ManifestSource(core.COMMAND_MANIFEST)
    return PackageSource(core.COMMANDS_PACKAGE)


class DisBot(discord.Client):
    """Discord client that loads, registers and dispatches slash commands."""

    def __init__(
        self,
        *,
        source: CommandSource | None = None,
        registrar: CommandRegistrar | None = None,
        intents: discord.Intents | None = None,
        debug: bool | None = None,
    ) -> None:
        super().__init__(intents=intents or discord.Intents.default())

        self.debug = core.DEBUG if debug is None else debug
        if self.debug:
            logging.getLogger("disbot").setLevel(logging.DEBUG)

        self.registry = CommandRegistry()
        self.loader = CommandLoader(source or default_source(), self.registry)
        self.dispatcher = Dispatcher(self, self.registry)
        self._registrar = registrar

    @property
    def commands(self) -> CommandRegistry:
        return self.registry

    async def setup_hook(self) -> None:
        """Load commands before the gateway connection is established."""

        await self.loader.load()

    def _registrar_for_sync(self) -> tuple[str, CommandRegistrar]:
        application_id, token = core.require_credentials()
        registrar = self._registrar or HttpRegistrar(token, api_base=core.API_BASE)
        return application_id, registrar

    async def sync_commands(self, guild_ids: Iterable[int] | None = None) -> Dict[int | str, bool]:
        """
        Push the registry to ``guild_ids`` (every joined guild by default).

        :raises ConfigurationError: If the application id or token is missing.
        """

        application_id, registrar = self._registrar_for_sync()
        targets = list(guild_ids) if guild_ids is not None else [g.id for g in self.guilds]
        if not targets:
            logger.info("No guilds to register commands with")
            return {}

        return await sync_all(
            self.registry,
            targets,
            registrar,
            application_id=application_id,
            timeout=sync.SYNC_TIMEOUT,
            retries=sync.SYNC_RETRIES,
            backoff=sync.SYNC_BACKOFF,
        )

    async def reload_commands(self) -> Dict[int | str, bool]:
        """Reload the registry from its source and re-register it everywhere."""

        await self.loader.load()
        return await self.sync_commands()

    async def on_ready(self) -> None:
        await ready_hook.handle(self)

    async def on_guild_join(self, guild: discord.Guild) -> None:
        await ready_hook.handle_guild_join(self, guild)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await interaction_hook.handle(self, interaction)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_API_TOKEN:
        logger.error("No DISCORD_API_TOKEN configured. Cannot run client.")
        return

    bot = DisBot()
    try:
        # Keep the logging configured in disbot.config.
        bot.run(core.DISCORD_API_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.exception("Unexpected error while running client: %s", exc)
