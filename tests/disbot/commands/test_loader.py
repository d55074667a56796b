import asyncio
import sys
import textwrap
import uuid

import pytest

from disbot.commands import (
    CommandLoader,
    CommandRegistry,
    ManifestSource,
    PackageSource,
    command,
    compile_registry,
)

VALID = """
from disbot.commands import Command

class {cls}(Command):
    name = "{name}"
    description = "{description}"

    async def execute(self, bot, interaction):
        return True

COMMAND = {cls}
"""


@pytest.fixture
def command_package(tmp_path, monkeypatch):
    """Create an importable package of command modules under ``tmp_path``."""

    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setattr(sys, "dont_write_bytecode", True)
    pkg_name = f"cmdpkg_{uuid.uuid4().hex}"
    pkg_dir = tmp_path / pkg_name
    pkg_dir.mkdir()
    (pkg_dir / "__init__.py").write_text("")

    def write(filename, source):
        (pkg_dir / filename).write_text(textwrap.dedent(source))

    yield pkg_name, write

    for mod in [m for m in sys.modules if m.startswith(pkg_name)]:
        del sys.modules[mod]


def _load(source, registry=None):
    loader = CommandLoader(source, registry)
    registry = asyncio.run(loader.load())
    return loader, registry


def test_package_source_skips_bad_artifacts(command_package):
    pkg, write = command_package
    write("ping.py", VALID.format(cls="Ping", name="ping", description="pong check"))
    write("echo.py", VALID.format(cls="Echo", name="echo", description="repeat"))
    write("broken.py", "raise RuntimeError('boom')\n")
    write("noexport.py", "VALUE = 1\n")
    write(
        "abstract.py",
        """
        from disbot.commands import Command

        class Half(Command):
            name = "half"
            description = "no behaviour"

        COMMAND = Half
        """,
    )
    write("badschema.py", VALID.format(cls="Bad", name="Bad Name", description="x"))
    write("_private.py", "raise RuntimeError('never imported')\n")
    write("notes.txt", "not python")

    loader, registry = _load(PackageSource(pkg))

    assert sorted(registry.names()) == ["echo", "ping"]
    assert sorted(err.artifact for err in loader.failures) == [
        "abstract",
        "badschema",
        "broken",
        "noexport",
    ]


def test_reload_is_idempotent(command_package):
    pkg, write = command_package
    write("ping.py", VALID.format(cls="Ping", name="ping", description="pong check"))
    write("echo.py", VALID.format(cls="Echo", name="echo", description="repeat"))

    loader = CommandLoader(PackageSource(pkg))

    async def _twice():
        first = await loader.load()
        first_names, first_schema = first.names(), compile_registry(first)
        second = await loader.load()
        return first_names, first_schema, second.names(), compile_registry(second)

    names_a, schema_a, names_b, schema_b = asyncio.run(_twice())

    assert names_a == names_b
    assert schema_a == schema_b


def test_reload_replaces_the_whole_set(command_package):
    pkg, write = command_package
    write("ping.py", VALID.format(cls="Ping", name="ping", description="pong check"))
    loader = CommandLoader(PackageSource(pkg))
    asyncio.run(loader.load())

    write("ping.py", "raise ImportError('gone')\n")
    write("stats.py", VALID.format(cls="Stats", name="stats", description="show stats"))
    registry = asyncio.run(loader.load())

    assert registry.names() == ["stats"]
    assert [err.artifact for err in loader.failures] == ["ping"]


def test_duplicate_names_last_loaded_wins(command_package):
    pkg, write = command_package
    write("a_first.py", VALID.format(cls="First", name="dup", description="first"))
    write("b_second.py", VALID.format(cls="Second", name="dup", description="second"))

    _, registry = _load(PackageSource(pkg))

    assert registry.names() == ["dup"]
    assert registry.get("dup").description == "second"


def test_empty_package_yields_empty_registry(command_package):
    pkg, _ = command_package

    loader, registry = _load(PackageSource(pkg))

    assert len(registry) == 0
    assert loader.failures == []


def test_missing_package_is_reported_as_a_failure():
    loader, registry = _load(PackageSource("definitely_not_a_package_xyz"))

    assert len(registry) == 0
    assert len(loader.failures) == 1


def test_manifest_source_loads_listed_classes():
    source = ManifestSource(
        [
            "disbot.commands.builtin.ping:PingCommand",
            "disbot.commands.builtin.ping:Missing",
            "not-an-entry",
        ]
    )

    loader, registry = _load(source)

    assert registry.names() == ["ping"]
    assert len(loader.failures) == 2


def test_builtin_package_loads():
    _, registry = _load(PackageSource("disbot.commands.builtin"))

    assert set(registry.names()) == {"help", "ping", "reload", "roll"}


def _make(name):
    @command(name, f"{name} command")
    async def handler(bot, interaction):
        return True

    return handler


class GatedSource:
    def __init__(self, classes, gate):
        self.classes = classes
        self.gate = gate

    def candidates(self):
        return list(self.classes)

    async def resolve(self, name):
        await self.gate.wait()
        return self.classes[name]


def test_readers_never_see_a_partial_registry():
    async def scenario():
        old = _make("old")()
        registry = CommandRegistry([old])
        gate = asyncio.Event()
        loader = CommandLoader(GatedSource({"a": _make("a"), "b": _make("b")}, gate), registry)

        task = asyncio.create_task(loader.load())
        for _ in range(5):
            await asyncio.sleep(0)
        during = registry.names()

        gate.set()
        await task
        return during, registry.names()

    during, after = asyncio.run(scenario())

    assert during == ["old"]
    assert after == ["a", "b"]


def test_load_waits_for_every_candidate():
    class SlowSource(GatedSource):
        async def resolve(self, name):
            await asyncio.sleep(0.01 if name == "slow" else 0)
            return self.classes[name]

    source = SlowSource({"fast": _make("fast"), "slow": _make("slow")}, gate=None)

    _, registry = _load(source)

    assert registry.names() == ["fast", "slow"]


SHARED_MODULE = """
import time

from disbot.commands import Command

time.sleep(0.2)


class Kick(Command):
    name = "kick"
    description = "{description}"

    async def execute(self, bot, interaction):
        return True


class Ban(Command):
    name = "ban"
    description = "{description}"

    async def execute(self, bot, interaction):
        return True
"""


def test_manifest_entries_sharing_a_module_see_the_same_version(tmp_path, monkeypatch):
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setattr(sys, "dont_write_bytecode", True)
    mod_name = f"sharedcmds_{uuid.uuid4().hex}"
    mod_path = tmp_path / f"{mod_name}.py"
    mod_path.write_text(SHARED_MODULE.format(description="v1"))

    loader = CommandLoader(ManifestSource([f"{mod_name}:Kick", f"{mod_name}:Ban"]))
    try:
        asyncio.run(loader.load())
        mod_path.write_text(SHARED_MODULE.format(description="v2 edited"))
        registry = asyncio.run(loader.load())
    finally:
        sys.modules.pop(mod_name, None)

    assert {cmd.name: cmd.description for cmd in registry} == {
        "kick": "v2 edited",
        "ban": "v2 edited",
    }
    assert loader.failures == []


class FlakySource(GatedSource):
    def __init__(self, classes):
        super().__init__(classes, gate=None)
        self.broken = False

    def candidates(self):
        if self.broken:
            raise RuntimeError("package __init__ failed")
        return super().candidates()

    async def resolve(self, name):
        return self.classes[name]


def test_enumeration_failure_keeps_previous_registry():
    source = FlakySource({"reload": _make("reload"), "ping": _make("ping")})
    loader = CommandLoader(source)
    asyncio.run(loader.load())

    source.broken = True
    registry = asyncio.run(loader.load())

    assert registry.names() == ["reload", "ping"]
    assert len(loader.failures) == 1
    assert "package __init__ failed" in loader.failures[0].reason
