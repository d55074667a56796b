from __future__ import annotations

import discord

from disbot.commands import Command


class HelpCommand(Command):
    """List available slash commands."""

    name = "help"
    description = "List available slash commands"

    async def execute(self, bot, interaction: discord.Interaction) -> bool:
        """
        Send the registered commands with their descriptions to the caller.

        Commands the caller is not allowed to run are left out.
        """
        user = interaction.user
        lines = [
            f"/{cmd.name}: {cmd.description}"
            for cmd in sorted(bot.commands, key=lambda c: c.name)
            if cmd.permission is None or cmd.permission.check(user)
        ]
        listing = "\n".join(lines) if lines else "None registered"
        await interaction.response.send_message(f"Available commands:\n{listing}", ephemeral=True)
        return True


COMMAND = HelpCommand
