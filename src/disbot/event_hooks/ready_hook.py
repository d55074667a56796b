import logging

import discord

from disbot.errors import ConfigurationError

logger = logging.getLogger(__name__)


async def handle(client) -> None:
    """Register commands with every guild once the client is ready."""
    user = client.user
    logger.info(f"Logged in as {getattr(user, 'name', '?')} (ID: {getattr(user, 'id', '?')})")
    logger.info("Bot ready, sending commands to %d guild(s)...", len(client.guilds))

    try:
        await client.sync_commands()
    except ConfigurationError as e:
        logger.error("Cannot register commands: %s", e)


async def handle_guild_join(client, guild: discord.Guild) -> None:
    """Register commands with a guild the bot just joined."""
    logger.info("Joined guild %s (ID: %s)", guild.name, guild.id)

    try:
        await client.sync_commands([guild.id])
    except ConfigurationError as e:
        logger.error("Cannot register commands for guild %s: %s", guild.id, e)
