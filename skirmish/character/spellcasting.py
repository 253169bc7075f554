"""
Spellcasting module for combatants.

Holds the spell slots, known, prepared and cantrip lists of a caster, and the
small amount of bookkeeping combat needs: checking whether a spell can be
cast and consuming the slot.
"""

from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field

from skirmish.actions.spells import Spell
from skirmish.core.constants import ABILITY_SCORES
from skirmish.core.utils import get_stat_modifier


class Spellcasting(BaseModel):
    """
    The spellcasting block of a combatant.

    Invariant: prepared is a subset of known, and its size never exceeds
    ``max_prepared`` for the owner it is checked against.
    """

    ability: str = Field(
        default="intelligence",
        description="Ability score governing spell attacks.",
    )
    slots: dict[int, int] = Field(
        default_factory=dict,
        description="Remaining spell slots, by slot level.",
    )
    known: list[str] = Field(
        default_factory=list,
        description="Names of the known spells.",
    )
    prepared: list[str] = Field(
        default_factory=list,
        description="Names of the prepared spells.",
    )
    cantrips: list[str] = Field(
        default_factory=list,
        description="Names of the cantrips, always castable.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        self.ability = self.ability.lower().strip()
        if self.ability not in ABILITY_SCORES:
            raise ValueError(f"Unknown spellcasting ability: {self.ability}")
        unknown = [name for name in self.prepared if name not in self.known]
        if unknown:
            raise ValueError(f"Prepared spells must be known: {unknown}")
        for level, count in self.slots.items():
            if level < 1 or count < 0:
                raise ValueError(f"Invalid spell slot entry: {level} -> {count}")

    # ============================================================================
    # PREPARATION
    # ============================================================================

    def max_prepared(self, stats: dict[str, int], level: int | None) -> int:
        """
        Returns how many spells the owner can have prepared.

        Args:
            stats (dict[str, int]): The owner's ability scores.
            level (int | None): The owner's level.

        Returns:
            int: ability modifier + level; 0 when that sum is negative.

        """
        score = stats.get(self.ability, 10)
        return max(0, get_stat_modifier(score) + (level or 1))

    def check_prepared(self, stats: dict[str, int], level: int | None) -> None:
        """
        Checks that the prepared list fits the owner's limit.

        Raises:
            ValueError: If more spells are prepared than the owner can hold.

        """
        limit = self.max_prepared(stats, level)
        if len(self.prepared) > limit:
            raise ValueError(
                f"{len(self.prepared)} spells prepared, the limit is {limit}"
            )

    def prepare(
        self, spell_name: str, stats: dict[str, int], level: int | None
    ) -> tuple[bool, str]:
        """
        Prepares a known spell.

        Args:
            spell_name (str): The spell to prepare.
            stats (dict[str, int]): The owner's ability scores.
            level (int | None): The owner's level.

        Returns:
            tuple[bool, str]: Whether it worked, and a message for the player.

        """
        if spell_name in self.prepared:
            return False, f"{spell_name} is already prepared"
        if spell_name not in self.known:
            return False, f"{spell_name} is not a known spell"
        limit = self.max_prepared(stats, level)
        if len(self.prepared) >= limit:
            return False, f"Prepared spell limit reached ({limit})"
        self.prepared.append(spell_name)
        return True, f"{spell_name} prepared"

    def unprepare(self, spell_name: str) -> tuple[bool, str]:
        """
        Removes a spell from the prepared list.

        Args:
            spell_name (str): The spell to remove.

        Returns:
            tuple[bool, str]: Whether it worked, and a message for the player.

        """
        if spell_name not in self.prepared:
            return False, f"Cannot unprepare {spell_name}"
        self.prepared.remove(spell_name)
        return True, f"{spell_name} removed from the prepared spells"

    # ============================================================================
    # CASTING
    # ============================================================================

    def is_ready(self, spell: Spell) -> bool:
        """Returns True if the spell is a cantrip or prepared."""
        if spell.is_cantrip:
            return spell.name in self.cantrips
        return spell.name in self.prepared

    def lowest_available_slot(self, level: int) -> int | None:
        """
        Finds the lowest slot level that can hold a spell of the given level.

        Args:
            level (int): The spell level.

        Returns:
            int | None: The slot level, or None if no slot is left.

        """
        for slot_level in sorted(self.slots):
            if slot_level >= level and self.slots[slot_level] > 0:
                return slot_level
        return None

    def can_cast(self, spell: Spell) -> bool:
        """Returns True if the spell is ready and affordable."""
        if not self.is_ready(spell):
            return False
        if spell.is_cantrip:
            return True
        return self.lowest_available_slot(spell.level) is not None

    def consume_slot(self, slot_level: int) -> bool:
        """
        Spends one slot of the given level.

        Args:
            slot_level (int): The slot level to spend.

        Returns:
            bool: False if no slot of that level was left.

        """
        if self.slots.get(slot_level, 0) <= 0:
            log_warning(
                f"No spell slot of level {slot_level} left to consume",
                {"slot_level": slot_level, "slots": self.slots},
            )
            return False
        self.slots[slot_level] -= 1
        return True
