"""Typed slash-command parameters."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Tuple, Union

import discord

ChoiceValue = Union[str, int, float]
Choice = Tuple[str, ChoiceValue]


class ArgumentType(enum.Enum):
    """Parameter kinds a command may declare, keyed to Discord option types."""

    STRING = discord.AppCommandOptionType.string
    INTEGER = discord.AppCommandOptionType.integer
    NUMBER = discord.AppCommandOptionType.number
    BOOLEAN = discord.AppCommandOptionType.boolean
    USER = discord.AppCommandOptionType.user
    CHANNEL = discord.AppCommandOptionType.channel
    ROLE = discord.AppCommandOptionType.role
    MENTIONABLE = discord.AppCommandOptionType.mentionable

    @property
    def wire_value(self) -> int:
        """Integer option type Discord expects in the command payload."""

        return self.value.value

    @property
    def accepts_choices(self) -> bool:
        return self in _CHOICE_TYPES


_CHOICE_TYPES = frozenset({ArgumentType.STRING, ArgumentType.INTEGER, ArgumentType.NUMBER})


@dataclass(frozen=True, slots=True)
class Argument:
    """
    One typed parameter of a command.

    :param type: Parameter kind.
    :param name: Option name shown in the Discord client.
    :param description: Help text shown next to the option.
    :param optional: ``False`` (the default) marks the option as required.
    :param choices: Ordered ``(label, value)`` pairs restricting the input.
        Only STRING, INTEGER and NUMBER arguments may carry choices.
    """

    type: ArgumentType
    name: str
    description: str
    optional: bool = False
    choices: Tuple[Choice, ...] = field(default=())

    def __post_init__(self) -> None:
        # Accept lists from call sites while keeping the dataclass hashable.
        object.__setattr__(self, "choices", tuple(tuple(choice) for choice in self.choices))

    @property
    def required(self) -> bool:
        return not self.optional


__all__ = ["Argument", "ArgumentType", "Choice", "ChoiceValue"]
