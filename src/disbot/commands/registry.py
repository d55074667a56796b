"""In-memory command registry published as immutable snapshots."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping

from .base import Command

logger = logging.getLogger(__name__)

__all__ = ["CommandRegistry"]


class CommandRegistry:
    """
    Name -> :class:`Command` lookup.

    Readers always see one complete snapshot; :meth:`replace` builds the next
    snapshot off to the side and publishes it with a single assignment, so a
    reload in progress is never visible half-done.
    """

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._snapshot: Mapping[str, Command] = MappingProxyType({})
        if commands:
            self.replace(commands)

    def replace(self, commands: Iterable[Command]) -> Mapping[str, Command]:
        """
        Swap in a new command set. On duplicate names the later command wins.

        :returns: The newly published snapshot.
        """
        staged: dict[str, Command] = {}
        for cmd in commands:
            if cmd.name in staged:
                logger.warning(
                    "Duplicate command name '%s': %r replaces %r",
                    cmd.name,
                    cmd,
                    staged[cmd.name],
                )
                # Re-insert so iteration order follows the winning command.
                del staged[cmd.name]
            staged[cmd.name] = cmd

        snapshot = MappingProxyType(staged)
        self._snapshot = snapshot
        return snapshot

    def snapshot(self) -> Mapping[str, Command]:
        """Return the current read-only mapping."""
        return self._snapshot

    def get(self, name: str) -> Command | None:
        return self._snapshot.get(name)

    def names(self) -> List[str]:
        return list(self._snapshot)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._snapshot.values()))

    def __len__(self) -> int:
        return len(self._snapshot)

    def __repr__(self) -> str:
        return f"<CommandRegistry commands={self.names()!r}>"
