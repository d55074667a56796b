from __future__ import annotations

import random

import discord

from disbot.commands import Argument, ArgumentType, command, option_values


@command(
    "roll",
    "Roll some dice",
    arguments=[
        Argument(
            ArgumentType.INTEGER,
            "sides",
            "Die to roll",
            choices=[("d4", 4), ("d6", 6), ("d8", 8), ("d10", 10), ("d12", 12), ("d20", 20)],
        ),
        Argument(ArgumentType.INTEGER, "count", "How many dice (default 1)", optional=True),
    ],
)
async def RollCommand(bot, interaction: discord.Interaction) -> bool:
    options = option_values(interaction)
    sides = int(options["sides"])
    count = int(options.get("count") or 1)
    if not 1 <= count <= 20:
        await interaction.response.send_message("You can roll between 1 and 20 dice.", ephemeral=True)
        return False

    rolls = [random.randint(1, sides) for _ in range(count)]
    detail = " + ".join(str(r) for r in rolls)
    await interaction.response.send_message(f"{count}d{sides}: {detail} = **{sum(rolls)}**")
    return True


COMMAND = RollCommand
