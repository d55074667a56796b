import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord

from disbot.errors import ConfigurationError
from disbot.event_hooks import interaction_hook, ready_hook


def _client(**overrides):
    client = SimpleNamespace(
        user=SimpleNamespace(name="disbot", id=1),
        guilds=[SimpleNamespace(id=10), SimpleNamespace(id=20)],
        sync_commands=AsyncMock(return_value={10: True, 20: True}),
        dispatcher=SimpleNamespace(dispatch=AsyncMock(return_value="executed")),
    )
    for key, value in overrides.items():
        setattr(client, key, value)
    return client


def test_ready_syncs_all_guilds():
    client = _client()

    asyncio.run(ready_hook.handle(client))

    client.sync_commands.assert_awaited_once_with()


def test_ready_logs_configuration_errors(caplog):
    client = _client(sync_commands=AsyncMock(side_effect=ConfigurationError("Missing APPLICATION_ID")))

    with caplog.at_level("ERROR"):
        asyncio.run(ready_hook.handle(client))

    assert "Missing APPLICATION_ID" in caplog.text


def test_guild_join_syncs_only_that_guild():
    client = _client()
    guild = SimpleNamespace(id=30, name="new guild")

    asyncio.run(ready_hook.handle_guild_join(client, guild))

    client.sync_commands.assert_awaited_once_with([30])


def test_application_commands_are_dispatched(make_interaction):
    client = _client()
    interaction = make_interaction("ping")

    result = asyncio.run(interaction_hook.handle(client, interaction))

    assert result == "executed"
    client.dispatcher.dispatch.assert_awaited_once_with(interaction)


def test_other_interactions_are_ignored(make_interaction):
    client = _client()
    interaction = make_interaction("button", kind=discord.InteractionType.component)

    asyncio.run(interaction_hook.handle(client, interaction))

    client.dispatcher.dispatch.assert_not_awaited()
