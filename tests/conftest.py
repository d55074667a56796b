import os, sys
from pathlib import Path
from types import SimpleNamespace

import discord
import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Credentials used by the registrar sync; individual tests override them.
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("APPLICATION_ID", "1234")


class FakeResponse:
    def __init__(self):
        self.sent = []
        self.deferred = False
        self._done = False

    def is_done(self):
        return self._done

    async def send_message(self, content=None, *, ephemeral=False):
        self.sent.append((content, ephemeral))
        self._done = True

    async def defer(self, *, ephemeral=False, thinking=False):
        self.deferred = True
        self._done = True


class FakeFollowup:
    def __init__(self):
        self.sent = []

    async def send(self, content=None, *, ephemeral=False):
        self.sent.append((content, ephemeral))


def _make_interaction(name="ping", *, options=None, user=None, kind=None):
    data = {"name": name}
    if options:
        data["options"] = [{"name": key, "value": value} for key, value in options.items()]
    return SimpleNamespace(
        id=99,
        type=kind or discord.InteractionType.application_command,
        data=data,
        command=None,
        user=user or SimpleNamespace(id=7, roles=[], guild_permissions=discord.Permissions.none()),
        response=FakeResponse(),
        followup=FakeFollowup(),
    )


@pytest.fixture
def make_interaction():
    return _make_interaction
