"""
Weapon definitions, as stored in the equipment registry.
"""

from typing import Any

from pydantic import BaseModel, Field

from skirmish.actions.attacks import Attack
from skirmish.core.constants import DamageType, RangeCategory


class Weapon(BaseModel):
    """
    Represents a weapon that a player or companion can have equipped.

    The engine does not manage equipment: it only turns the equipped weapons
    into attacks when an encounter starts.
    """

    name: str = Field(
        description="The name of the weapon.",
    )
    description: str = Field(
        default="No description.",
        description="A description of the weapon.",
    )
    damage: str = Field(
        description="Damage descriptor of the weapon, e.g. '1d8'.",
    )
    damage_type: DamageType | None = Field(
        default=None,
        description="Type of the damage dealt.",
    )
    range_category: RangeCategory = Field(
        default=RangeCategory.MELEE,
        description="Whether the weapon is used in melee or at range.",
    )
    range: int = Field(
        default=1,
        ge=1,
        description="Reach of the weapon in grid squares.",
    )
    stat: str | None = Field(
        default=None,
        description="Ability score governing the weapon (finesse, etc.).",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.name:
            raise ValueError("name must be a non-empty string")

    def to_attack(self) -> Attack:
        """
        Builds the attack made with this weapon.

        Returns:
            Attack: The attack, named after the weapon.

        """
        return Attack(
            name=self.name,
            damage=self.damage,
            damage_type=self.damage_type,
            range_category=self.range_category,
            range=self.range,
            stat=self.stat,
        )
