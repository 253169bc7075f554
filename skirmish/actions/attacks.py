"""
Attack definitions.
"""

from typing import Any

from pydantic import BaseModel, Field

from skirmish.core.constants import ABILITY_SCORES, DamageType, RangeCategory
from skirmish.core.dice_parser import parse_damage


class Attack(BaseModel):
    """
    An attack a combatant can make: a weapon swing, a bite, a shortbow shot.

    Enemy templates may hardcode ``attack_bonus``; every other attack derives
    its bonus from the attacker's stats and proficiency.
    """

    name: str = Field(
        description="Name of the attack.",
    )
    damage: str = Field(
        description="Damage descriptor, e.g. '1d8+2'.",
    )
    attack_bonus: int | None = Field(
        default=None,
        description="Fixed attack bonus overriding the derived one.",
    )
    damage_type: DamageType | None = Field(
        default=None,
        description="Type of the damage dealt.",
    )
    range_category: RangeCategory = Field(
        default=RangeCategory.MELEE,
        description="Whether the attack is made in melee or at range.",
    )
    range: int = Field(
        default=1,
        ge=1,
        description="Reach of the attack in grid squares.",
    )
    stat: str | None = Field(
        default=None,
        description="Ability score governing the attack, if not the default.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.name:
            raise ValueError("name must be a non-empty string")
        if self.stat is not None:
            self.stat = self.stat.lower().strip()
            if self.stat not in ABILITY_SCORES:
                raise ValueError(f"Unknown ability score: {self.stat}")
        # Dice that do not parse are kept: they roll 0 and get logged.
        self.damage = self.damage.replace(" ", "")

    @property
    def is_ranged(self) -> bool:
        """Returns True for ranged attacks and for melee attacks with reach."""
        return self.range_category == RangeCategory.RANGED or self.range > 1

    @property
    def average_damage(self) -> float:
        """Returns the expected damage of a hit."""
        parsed = parse_damage(self.damage)
        return parsed.value.average if parsed.value else 0.0
