"""
Command discovery.

A :class:`CommandSource` lists candidate artifacts and resolves each one to a
:class:`Command` subclass. Two sources ship with the package:

- :class:`PackageSource` scans a Python package; every public module exports
  its command class as ``COMMAND``.
- :class:`ManifestSource` takes an explicit list of ``"module:ClassName"``
  entries.

:class:`CommandLoader` resolves every candidate concurrently, skips (and logs)
the ones that fail, and publishes the survivors to a :class:`CommandRegistry`
in one swap once all attempts have settled.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
import sys
from pkgutil import iter_modules
from types import ModuleType
from typing import List, Protocol, Sequence, Type

from disbot.errors import LoadError

from .base import Command
from .registry import CommandRegistry
from .schema import SchemaError, compile_command

logger = logging.getLogger(__name__)

__all__ = [
    "CommandLoader",
    "CommandSource",
    "ManifestSource",
    "PackageSource",
    "EXPORT_NAME",
]

# Attribute a command module uses to export its command class.
EXPORT_NAME = "COMMAND"


class CommandSource(Protocol):
    """Where command classes come from."""

    def candidates(self) -> List[str]:
        """Return artifact identifiers in load order."""

    async def resolve(self, name: str) -> Type[Command]:
        """Return the command class for ``name`` or raise."""


def _import_fresh(module_name: str) -> ModuleType:
    """Import ``module_name``, re-executing it when it was imported before."""

    module = sys.modules.get(module_name)
    if module is not None:
        return importlib.reload(module)
    return importlib.import_module(module_name)


class _CycleImports:
    """
    One fresh import per module per load cycle.

    Entries sharing a module await the same task, so a module is never
    reloaded twice at once and every entry sees the same version of it.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[ModuleType]] = {}

    def reset(self) -> None:
        self._tasks = {}

    async def get(self, module_name: str) -> ModuleType:
        task = self._tasks.get(module_name)
        if task is None:
            task = asyncio.ensure_future(asyncio.to_thread(_import_fresh, module_name))
            self._tasks[module_name] = task
        return await task


class PackageSource:
    """Command modules living inside one Python package."""

    def __init__(self, package: str) -> None:
        self.package = package
        self._imports = _CycleImports()

    def candidates(self) -> List[str]:
        self._imports.reset()
        importlib.invalidate_caches()
        pkg = importlib.import_module(self.package)
        search_path = getattr(pkg, "__path__", None)
        if search_path is None:
            raise LoadError(self.package, "not a package")

        names = [
            modname
            for _, modname, ispkg in iter_modules(search_path)
            if not ispkg and not modname.startswith("_")
        ]
        return sorted(names)

    async def resolve(self, name: str) -> Type[Command]:
        module = await self._imports.get(f"{self.package}.{name}")
        try:
            return getattr(module, EXPORT_NAME)
        except AttributeError:
            raise LoadError(name, f"module does not export {EXPORT_NAME}") from None

    def __repr__(self) -> str:
        return f"PackageSource({self.package!r})"


class ManifestSource:
    """Explicit registration table of ``"package.module:ClassName"`` entries."""

    def __init__(self, entries: Sequence[str]) -> None:
        self.entries = list(entries)
        self._imports = _CycleImports()

    def candidates(self) -> List[str]:
        self._imports.reset()
        return list(self.entries)

    async def resolve(self, name: str) -> Type[Command]:
        module_name, sep, attr = name.partition(":")
        if not sep or not module_name or not attr:
            raise LoadError(name, "manifest entries must look like 'package.module:ClassName'")

        module = await self._imports.get(module_name)
        try:
            return getattr(module, attr)
        except AttributeError:
            raise LoadError(name, f"module {module_name} has no attribute {attr}") from None

    def __repr__(self) -> str:
        return f"ManifestSource({len(self.entries)} entries)"


class CommandLoader:
    """Build (and rebuild) a registry from a :class:`CommandSource`."""

    def __init__(self, source: CommandSource, registry: CommandRegistry | None = None) -> None:
        self.source = source
        self.registry = registry if registry is not None else CommandRegistry()
        self.failures: List[LoadError] = []
        self._lock = asyncio.Lock()

    async def load(self) -> CommandRegistry:
        """
        Load every candidate and replace the registry contents.

        Never raises for individual artifacts; failures are logged and kept
        in :attr:`failures` until the next load. If the source cannot be
        enumerated at all, the current registry is left untouched.
        """

        async with self._lock:
            logger.info("Loading commands from %r", self.source)
            try:
                names = list(self.source.candidates())
            except Exception as exc:
                # The previous snapshot stays published.
                logger.exception(
                    "Could not enumerate commands from %r; keeping %d loaded command(s)",
                    self.source,
                    len(self.registry),
                )
                self.failures = [LoadError(repr(self.source), f"{type(exc).__name__}: {exc}")]
                return self.registry

            results = await asyncio.gather(*(self._load_one(name) for name in names))

            loaded = [cmd for cmd, _ in results if cmd is not None]
            self.failures = [err for _, err in results if err is not None]
            self.registry.replace(loaded)

            if loaded:
                logger.info(
                    "Loaded %d command(s); %d artifact(s) failed",
                    len(self.registry),
                    len(self.failures),
                )
            else:
                logger.warning("No commands loaded from %r", self.source)

            return self.registry

    async def _load_one(self, name: str) -> tuple[Command | None, LoadError | None]:
        try:
            cmd = await self._instantiate(name)
        except LoadError as exc:
            logger.error('File "%s" is not a valid command: %s', name, exc.reason)
            return None, exc
        except Exception as exc:
            logger.exception('File "%s" is not a valid command', name)
            return None, LoadError(name, f"{type(exc).__name__}: {exc}")

        logger.info('Loaded command "%s"', cmd.name)
        return cmd, None

    async def _instantiate(self, name: str) -> Command:
        cls = await self.source.resolve(name)

        if not (inspect.isclass(cls) and issubclass(cls, Command)):
            raise LoadError(name, f"{cls!r} is not a Command subclass")
        if inspect.isabstract(cls):
            raise LoadError(name, f"{cls.__name__} does not implement execute()")

        cmd = cls()
        # Reject definitions Discord would refuse before they reach the registry.
        try:
            compile_command(cmd)
        except SchemaError as exc:
            raise LoadError(name, str(exc)) from exc
        return cmd
