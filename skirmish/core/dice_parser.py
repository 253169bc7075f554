"""
Dice module for the combat engine.

Provides the injectable die sources and the damage-descriptor parser used to
roll attacks, spells and initiative.
"""

import random
import re
from collections.abc import Iterable, Sequence
from typing import TypeVar

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from .error_handling import ErrorKind, Resolved

T = TypeVar("T")

DAMAGE_PATTERN = re.compile(r"^(\d+)d(\d+)(?:\+(\d+))?$", re.IGNORECASE)


# =============================================================================
# Die sources
# =============================================================================


class DiceRoller:
    """
    Uniform die source backed by random.Random.

    Production code uses an unseeded instance. Passing a seed makes every
    roll reproducible, which is what tests and replays rely on.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def roll(self, sides: int) -> int:
        """
        Rolls a single die.

        Args:
            sides (int): The number of sides of the die.

        Returns:
            int: A uniformly distributed integer in [1, sides].

        """
        if sides < 1:
            raise ValueError(f"A die needs at least one side, got {sides}")
        return self._random.randint(1, sides)

    def choice(self, seq: Sequence[T]) -> T:
        """
        Picks a uniformly random element of a non-empty sequence.

        Args:
            seq (Sequence[T]): The sequence to pick from.

        Returns:
            T: The chosen element.

        """
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)


class ScriptedDice(DiceRoller):
    """
    Die source that returns a fixed script of results, in order.

    Choices always pick the first element and do not consume the script, so
    the script only has to list the actual dice.
    """

    def __init__(self, rolls: Iterable[int]) -> None:
        super().__init__(seed=0)
        self._rolls: list[int] = list(rolls)
        self._position = 0

    @property
    def remaining(self) -> int:
        """Returns how many scripted rolls have not been used yet."""
        return len(self._rolls) - self._position

    def roll(self, sides: int) -> int:
        if self._position >= len(self._rolls):
            raise RuntimeError(
                f"Dice script exhausted after {len(self._rolls)} rolls"
            )
        value = self._rolls[self._position]
        self._position += 1
        return value

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return seq[0]


class FixedDice(ScriptedDice):
    """Die source that always returns the same value."""

    def __init__(self, value: int) -> None:
        super().__init__([])
        self.value = value

    @property
    def remaining(self) -> int:
        return -1

    def roll(self, sides: int) -> int:
        return self.value


_DEFAULT_DICE = DiceRoller()


def default_dice() -> DiceRoller:
    """Returns the shared unseeded die source used when none is injected."""
    return _DEFAULT_DICE


def roll_die(sides: int, dice: DiceRoller | None = None) -> int:
    """
    Rolls a single die with the given number of sides.

    Args:
        sides (int): The number of sides.
        dice (DiceRoller | None): The die source. Defaults to the shared one.

    Returns:
        int: The rolled value.

    """
    return (dice or _DEFAULT_DICE).roll(sides)


def roll_d20(dice: DiceRoller | None = None) -> int:
    """Rolls a d20."""
    return roll_die(20, dice)


# =============================================================================
# Damage descriptors
# =============================================================================


class DamageDice(BaseModel):
    """A parsed "NdM+B" damage descriptor."""

    count: int = Field(
        ge=1,
        description="Number of dice rolled.",
    )
    sides: int = Field(
        ge=1,
        description="Number of sides of each die.",
    )
    bonus: int = Field(
        default=0,
        ge=0,
        description="Flat bonus added to the dice total.",
    )

    @property
    def minimum(self) -> int:
        """Returns the smallest possible total."""
        return self.count + self.bonus

    @property
    def maximum(self) -> int:
        """Returns the largest possible total."""
        return self.count * self.sides + self.bonus

    @property
    def average(self) -> float:
        """Returns the expected total."""
        return self.count * (self.sides + 1) / 2 + self.bonus

    def roll(self, dice: DiceRoller | None = None) -> int:
        """
        Rolls the descriptor.

        Args:
            dice (DiceRoller | None): The die source.

        Returns:
            int: The sum of the dice plus the bonus.

        """
        return sum(roll_die(self.sides, dice) for _ in range(self.count)) + self.bonus

    def __str__(self) -> str:
        if self.bonus:
            return f"{self.count}d{self.sides}+{self.bonus}"
        return f"{self.count}d{self.sides}"


def parse_damage(descriptor: str | None) -> Resolved[DamageDice | None]:
    """
    Parses a damage descriptor of the form "NdM" or "NdM+B".

    Args:
        descriptor (str | None): The descriptor to parse.

    Returns:
        Resolved[DamageDice | None]:
            The parsed dice, or None with an INVALID_DICE error.

    """
    if not isinstance(descriptor, str):
        log_warning(
            f"Damage descriptor must be a string, got: {descriptor!r}",
            {"descriptor": descriptor},
        )
        return Resolved[DamageDice | None](value=None, error=ErrorKind.INVALID_DICE)

    match = DAMAGE_PATTERN.match(descriptor.replace(" ", ""))
    if not match:
        log_warning(
            f"Invalid damage descriptor: '{descriptor}'",
            {"descriptor": descriptor},
        )
        return Resolved[DamageDice | None](value=None, error=ErrorKind.INVALID_DICE)

    count_str, sides_str, bonus_str = match.groups()
    count = int(count_str)
    sides = int(sides_str)
    bonus = int(bonus_str) if bonus_str else 0

    if count < 1 or sides < 1:
        log_warning(
            f"Damage descriptor out of bounds: '{descriptor}'",
            {"descriptor": descriptor, "count": count, "sides": sides},
        )
        return Resolved[DamageDice | None](value=None, error=ErrorKind.INVALID_DICE)

    return Resolved[DamageDice | None](
        value=DamageDice(count=count, sides=sides, bonus=bonus)
    )


def try_roll_damage(
    descriptor: str | None,
    dice: DiceRoller | None = None,
) -> Resolved[int]:
    """
    Rolls a damage descriptor, reporting why it fell back to zero.

    Args:
        descriptor (str | None): The damage descriptor.
        dice (DiceRoller | None): The die source.

    Returns:
        Resolved[int]: The rolled total, or 0 with the parse error.

    """
    parsed = parse_damage(descriptor)
    if parsed.value is None:
        return Resolved[int](value=0, error=parsed.error)
    total = parsed.value.roll(dice)
    log_debug(f"Rolled {descriptor} -> {total}")
    return Resolved[int](value=total)


def roll_damage(descriptor: str | None, dice: DiceRoller | None = None) -> int:
    """
    Rolls a damage descriptor.

    Args:
        descriptor (str | None): The damage descriptor, e.g. "2d6+3".
        dice (DiceRoller | None): The die source.

    Returns:
        int: The rolled total, or 0 if the descriptor is invalid.

    """
    return try_roll_damage(descriptor, dice).value


def average_damage(descriptor: str | None) -> float:
    """
    Returns the expected total of a damage descriptor, 0 when invalid.

    Args:
        descriptor (str | None): The damage descriptor.

    Returns:
        float: The average roll.

    """
    parsed = parse_damage(descriptor)
    return parsed.value.average if parsed.value else 0.0
