"""
Spell definitions.
"""

from typing import Any

from pydantic import BaseModel, Field

from skirmish.core.constants import DamageType, SpellCategory
from skirmish.core.dice_parser import average_damage


class SpellDamage(BaseModel):
    """Damage dealt by an offensive spell."""

    dice: str = Field(
        description="Damage descriptor, e.g. '1d10'.",
    )
    bonus: int = Field(
        default=0,
        description="Flat bonus added after the roll.",
    )
    damage_type: DamageType | None = Field(
        default=None,
        description="Type of the damage dealt.",
    )


class SpellHealing(BaseModel):
    """Healing granted by a healing spell."""

    dice: str = Field(
        description="Healing descriptor, e.g. '1d8'.",
    )
    bonus: int = Field(
        default=0,
        description="Flat bonus added after the roll.",
    )
    add_ability_modifier: bool = Field(
        default=True,
        description="Whether the spellcasting modifier is added.",
    )


class Spell(BaseModel):
    """A spell as listed in the spellbook."""

    name: str = Field(
        description="Name of the spell.",
    )
    level: int = Field(
        default=0,
        ge=0,
        le=9,
        description="Spell level, 0 for cantrips.",
    )
    category: SpellCategory = Field(
        default=SpellCategory.OFFENSIVE,
        description="Whether the spell deals damage or heals.",
    )
    requires_attack_roll: bool = Field(
        default=True,
        description="Whether the caster rolls to hit; auto-hit otherwise.",
    )
    damage: SpellDamage | None = Field(
        default=None,
        description="Damage dealt by the spell, for offensive spells.",
    )
    healing: SpellHealing | None = Field(
        default=None,
        description="Healing granted by the spell, for healing spells.",
    )
    range: int = Field(
        default=6,
        ge=1,
        description="Range of the spell in grid squares.",
    )
    description: str = Field(
        default="No description.",
        description="Description of the spell.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.name:
            raise ValueError("name must be a non-empty string")
        if self.category == SpellCategory.OFFENSIVE and self.damage is None:
            raise ValueError(f"Offensive spell {self.name} needs a damage entry")
        if self.category == SpellCategory.HEALING and self.healing is None:
            raise ValueError(f"Healing spell {self.name} needs a healing entry")

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0

    @property
    def average_damage(self) -> float:
        """Returns the expected damage of the spell, 0 for healing spells."""
        if self.damage is None:
            return 0.0
        return average_damage(self.damage.dice) + self.damage.bonus
