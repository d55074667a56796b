from __future__ import annotations

import math

import discord

from disbot.commands import Command


class PingCommand(Command):
    """Report websocket latency."""

    name = "ping"
    description = "Check that the bot is responsive"

    async def execute(self, bot, interaction: discord.Interaction) -> bool:
        # discord.py reports inf before the first heartbeat ACK and nan without a websocket.
        latency = getattr(bot, "latency", None)
        if isinstance(latency, (int, float)) and math.isfinite(latency):
            message = f"Pong! ({round(latency * 1000)} ms)"
        else:
            message = "Pong!"
        await interaction.response.send_message(message, ephemeral=True)
        return True


COMMAND = PingCommand
