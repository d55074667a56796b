import logging

import discord

logger = logging.getLogger(__name__)


async def handle(client, interaction: discord.Interaction):
    """Forward slash-command interactions to the dispatcher."""

    # Buttons, autocomplete and modals are not routed through the registry.
    if interaction.type is not discord.InteractionType.application_command:
        return

    try:
        return await client.dispatcher.dispatch(interaction)
    except Exception:  # pragma: no cover - defensive guard
        logger.exception("Dispatch failed for interaction %s", interaction.id)
