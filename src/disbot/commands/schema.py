"""
Schema compiler: command definitions -> Discord application-command payloads.

The payload for one command looks like::

    {
        "name": "query",
        "description": "Search things",
        "options": [
            {"type": 3, "name": "term", "description": "...", "required": True,
             "choices": [{"name": "a", "value": "a"}]},
        ],
    }

Compilation is pure and deterministic. Invalid definitions raise
:class:`SchemaError` instead of being silently passed to Discord, which
would reject the whole replace-all request for the guild.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

from .arguments import Argument, ArgumentType

if TYPE_CHECKING:
    from .base import Command

__all__ = [
    "SchemaError",
    "compile_argument",
    "compile_command",
    "compile_registry",
]

MAX_OPTIONS = 25
MAX_CHOICES = 25
MAX_DESCRIPTION = 100

_NAME_RE = re.compile(r"^[-_\w]{1,32}$")


class SchemaError(ValueError):
    """Raised when a command or argument cannot be expressed as a payload."""


def _check_name(name: str, what: str) -> None:
    if not isinstance(name, str) or not _NAME_RE.match(name) or name != name.lower():
        raise SchemaError(f"Invalid {what} name {name!r}: expected 1-32 lowercase word characters")


def _check_description(description: str, what: str) -> None:
    if not isinstance(description, str) or not description.strip():
        raise SchemaError(f"{what} needs a non-empty description")
    if len(description) > MAX_DESCRIPTION:
        raise SchemaError(f"{what} description exceeds {MAX_DESCRIPTION} characters")


def _check_choice_value(arg: Argument, value: Any) -> None:
    # bool is an int subclass but never a valid choice value.
    if isinstance(value, bool):
        ok = False
    elif arg.type is ArgumentType.INTEGER:
        ok = isinstance(value, int)
    elif arg.type is ArgumentType.NUMBER:
        ok = isinstance(value, (int, float))
    else:
        ok = isinstance(value, (str, int, float))

    if not ok:
        raise SchemaError(
            f"Choice value {value!r} on argument '{arg.name}' does not fit type {arg.type.name}"
        )


def compile_argument(arg: Argument) -> Dict[str, Any]:
    """Return the option descriptor for a single :class:`Argument`."""

    _check_name(arg.name, "argument")
    _check_description(arg.description, f"Argument '{arg.name}'")

    option: Dict[str, Any] = {
        "type": arg.type.wire_value,
        "name": arg.name,
        "description": arg.description,
        "required": not arg.optional,
    }

    if arg.choices:
        if not arg.type.accepts_choices:
            raise SchemaError(
                f"Argument '{arg.name}' of type {arg.type.name} cannot declare choices"
            )
        if len(arg.choices) > MAX_CHOICES:
            raise SchemaError(f"Argument '{arg.name}' declares more than {MAX_CHOICES} choices")

        choices = []
        for label, value in arg.choices:
            if not isinstance(label, str) or not label:
                raise SchemaError(f"Choice label {label!r} on argument '{arg.name}' must be text")
            _check_choice_value(arg, value)
            choices.append({"name": label, "value": value})
        option["choices"] = choices

    return option


def compile_command(command: "Command") -> Dict[str, Any]:
    """
    Compile ``command`` into the payload Discord's bulk-overwrite endpoint expects.

    :param command: Any object exposing ``name``, ``description`` and ``arguments``.
    :returns: ``{"name", "description", "options"}`` mapping.
    :raises SchemaError: If the definition violates Discord's constraints.
    """

    _check_name(command.name, "command")
    _check_description(command.description, f"Command '{command.name}'")

    arguments = tuple(command.arguments or ())
    if len(arguments) > MAX_OPTIONS:
        raise SchemaError(f"Command '{command.name}' declares more than {MAX_OPTIONS} arguments")

    options: List[Dict[str, Any]] = []
    seen: set[str] = set()
    optional_seen = False
    for arg in arguments:
        if arg.name in seen:
            raise SchemaError(f"Command '{command.name}' declares argument '{arg.name}' twice")
        seen.add(arg.name)

        # Discord requires every required option to precede the optional ones.
        if arg.optional:
            optional_seen = True
        elif optional_seen:
            raise SchemaError(
                f"Required argument '{arg.name}' follows an optional one in '{command.name}'"
            )

        options.append(compile_argument(arg))

    return {
        "name": command.name,
        "description": command.description,
        "options": options,
    }


def compile_registry(commands: Iterable["Command"]) -> List[Dict[str, Any]]:
    """Compile every command in iteration order."""

    return [compile_command(cmd) for cmd in commands]
