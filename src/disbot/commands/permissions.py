"""Declarative permission policies evaluated at dispatch time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, FrozenSet, Iterable

__all__ = ["PermissionPolicy", "member_capabilities", "member_roles"]


def _normalise(values: Iterable[Any] | None) -> FrozenSet[str] | None:
    if values is None:
        return None
    if isinstance(values, (str, int)):
        values = [values]
    return frozenset(str(v) for v in values)


@dataclass(frozen=True, slots=True)
class PermissionPolicy:
    """
    Who may invoke a command.

    ``roles`` holds role ids or role names; ``capabilities`` holds
    :class:`discord.Permissions` flag names such as ``"manage_guild"``.

    - ``strict=True``: the user needs every role and every capability.
    - ``strict=False``: any single role or any single capability is enough.
    - Neither set: everybody is allowed.
    """

    roles: FrozenSet[str] | None = None
    capabilities: FrozenSet[str] | None = None
    strict: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _normalise(self.roles))
        object.__setattr__(self, "capabilities", _normalise(self.capabilities))

    @property
    def unrestricted(self) -> bool:
        return not self.roles and not self.capabilities

    def allows(self, roles: AbstractSet[str], capabilities: AbstractSet[str]) -> bool:
        """
        Evaluate the policy against the identifiers a user holds.

        :param roles: Role ids and names (as text) held by the user.
        :param capabilities: Names of the permissions granted to the user.
        """

        if self.unrestricted:
            return True

        wanted_roles = self.roles or frozenset()
        wanted_caps = self.capabilities or frozenset()

        if self.strict:
            return wanted_roles <= roles and wanted_caps <= capabilities

        return bool(wanted_roles & roles) or bool(wanted_caps & capabilities)

    def check(self, member: Any) -> bool:
        """Evaluate the policy for a :class:`discord.Member` (or user) object."""

        if self.unrestricted:
            return True
        return self.allows(member_roles(member), member_capabilities(member))


def member_roles(member: Any) -> FrozenSet[str]:
    """Return role ids and names held by ``member``; DM users hold none."""

    held: set[str] = set()
    for role in getattr(member, "roles", None) or ():
        role_id = getattr(role, "id", None)
        if role_id is not None:
            held.add(str(role_id))
        name = getattr(role, "name", None)
        if name:
            held.add(str(name))
    return frozenset(held)


def member_capabilities(member: Any) -> FrozenSet[str]:
    """Return the names of permission flags set in ``member.guild_permissions``."""

    perms = getattr(member, "guild_permissions", None)
    if perms is None:
        return frozenset()
    # discord.Permissions iterates as (flag_name, enabled) pairs.
    return frozenset(name for name, enabled in perms if enabled)
