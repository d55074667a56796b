from __future__ import annotations

import discord

from disbot.commands import Command, PermissionPolicy


class ReloadCommand(Command):
    """
    Slash command: ``/reload``

    Effect
    ------
    - Rebuilds the command registry from the configured source.
    - Re-registers the new command set with every joined guild.
    """

    name = "reload"
    description = "Reload commands and re-register them with Discord"
    permission = PermissionPolicy(capabilities={"administrator"})

    async def execute(self, bot, interaction: discord.Interaction) -> bool:
        await interaction.response.defer(ephemeral=True, thinking=True)

        outcome = await bot.reload_commands()
        synced = sum(1 for ok in outcome.values() if ok)
        failures = len(bot.loader.failures)

        message = f"Reloaded {len(bot.commands)} command(s); synced {synced}/{len(outcome)} guild(s)."
        if failures:
            message += f" {failures} command file(s) failed to load, see logs."
        await interaction.followup.send(message, ephemeral=True)
        return synced == len(outcome)


COMMAND = ReloadCommand
