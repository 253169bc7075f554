"""
Combatant module for the combat engine.

Defines the records the engine fights with. A Combatant is one of three
variants, Player, Companion or Enemy, sharing the same capability surface:
hit points, armor class, ability scores, attacks and optional spellcasting.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from skirmish.actions.abilities import SupportAbility
from skirmish.actions.attacks import Attack
from skirmish.core.constants import ABILITY_SCORES, CombatantType
from skirmish.core.utils import get_proficiency_bonus, get_stat_modifier

from .spellcasting import Spellcasting


class Position(BaseModel):
    """A square of the battlefield grid."""

    x: int = Field(description="Column, 0 on the left.")
    y: int = Field(description="Row, 0 on the top.")


class Combatant(BaseModel):
    """
    Base record of anything that takes part in a fight.

    Attributes:
        id (str):
            Unique id inside the encounter.
        name (str):
            Display name.
        kind (CombatantType):
            The variant tag.
        current_hp (int):
            Current hit points, always within [0, max_hp].
        max_hp (int):
            Maximum hit points.
        armor_class (int):
            Threshold an attack total must meet to hit.
        level (int | None):
            Character level, used for the proficiency bonus.
        stats (dict[str, int]):
            Ability scores, by lowercase ability name.
        attacks (list[Attack]):
            Attacks the combatant can make.
        spellcasting (Spellcasting | None):
            Spellcasting block, for casters.
        equipment (dict[str, str]):
            Equipped weapon keys, by slot.

    """

    VARIANT: ClassVar[CombatantType | None] = None

    id: str = Field(
        description="Unique id of the combatant inside the encounter.",
    )
    name: str = Field(
        description="Display name of the combatant.",
    )
    kind: CombatantType = Field(
        description="Variant of the combatant.",
    )
    current_hp: int | None = Field(
        default=None,
        description="Current hit points; defaults to max_hp.",
    )
    max_hp: int = Field(
        gt=0,
        description="Maximum hit points.",
    )
    armor_class: int = Field(
        default=10,
        description="Armor class.",
    )
    level: int | None = Field(
        default=None,
        ge=1,
        description="Character level, if the combatant has one.",
    )
    stats: dict[str, int] = Field(
        default_factory=dict,
        description="Ability scores, by lowercase ability name.",
    )
    attacks: list[Attack] = Field(
        default_factory=list,
        description="Attacks the combatant can make.",
    )
    spellcasting: Spellcasting | None = Field(
        default=None,
        description="Spellcasting block, for casters.",
    )
    equipment: dict[str, str] = Field(
        default_factory=dict,
        description="Equipped weapon keys, by slot.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.id:
            raise ValueError("id must be a non-empty string")
        if self.VARIANT is not None and self.kind != self.VARIANT:
            raise ValueError(f"{type(self).__name__} cannot have kind {self.kind}")
        self.stats = {key.lower().strip(): value for key, value in self.stats.items()}
        for key, value in self.stats.items():
            if key not in ABILITY_SCORES:
                raise ValueError(f"Unknown ability score: {key}")
            if not 1 <= value <= 30:
                raise ValueError(f"Ability score {key} out of range: {value}")
        if self.spellcasting is not None:
            self.spellcasting.check_prepared(self.stats, self.level)
        if self.current_hp is None:
            self.current_hp = self.max_hp
        self.current_hp = max(0, min(self.current_hp, self.max_hp))

    # ============================================================================
    # DERIVED VALUES
    # ============================================================================

    @property
    def proficiency_bonus(self) -> int:
        """Returns the level-derived proficiency bonus."""
        return get_proficiency_bonus(self.level)

    def modifier(self, ability: str) -> int | None:
        """
        Returns the modifier of an ability score.

        Args:
            ability (str): The lowercase ability name.

        Returns:
            int | None: The modifier, or None if the score is missing.

        """
        score = self.stats.get(ability)
        if score is None:
            return None
        return get_stat_modifier(score)

    @property
    def hp_ratio(self) -> float:
        """Returns current HP over max HP."""
        return self.hp / self.max_hp

    @property
    def hp(self) -> int:
        """Returns the current HP as a plain integer."""
        return self.current_hp or 0

    # ============================================================================
    # STATUS
    # ============================================================================

    def is_alive(self) -> bool:
        return self.hp > 0

    def is_defeated(self) -> bool:
        return self.hp <= 0

    # ============================================================================
    # HIT POINTS
    # ============================================================================

    def take_damage(self, amount: int) -> int:
        """
        Removes hit points, never going below 0.

        Args:
            amount (int): The damage to take.

        Returns:
            int: The hit points actually lost.

        """
        amount = max(0, amount)
        lost = min(self.hp, amount)
        self.current_hp = self.hp - lost
        return lost

    def heal(self, amount: int) -> int:
        """
        Restores hit points, never going above max_hp.

        Args:
            amount (int): The healing to receive.

        Returns:
            int: The hit points actually restored.

        """
        amount = max(0, amount)
        restored = min(self.max_hp - self.hp, amount)
        self.current_hp = self.hp + restored
        return restored

    def get_attack(self, name: str) -> Attack | None:
        """Returns the attack with the given name, if any."""
        return next((a for a in self.attacks if a.name == name), None)

    def __str__(self) -> str:
        return f"{self.name} ({self.hp}/{self.max_hp} HP, AC {self.armor_class})"


class Player(Combatant):
    """The player character, controlled through the input collaborator."""

    VARIANT: ClassVar[CombatantType | None] = CombatantType.PLAYER
    id: str = "player"
    kind: CombatantType = CombatantType.PLAYER


class Companion(Combatant):
    """The AI-controlled ally of the player."""

    VARIANT: ClassVar[CombatantType | None] = CombatantType.COMPANION
    id: str = "companion"
    kind: CombatantType = CombatantType.COMPANION
    support_abilities: list[SupportAbility] = Field(
        default_factory=list,
        description="Heal, protect and taunt abilities.",
    )

    def get_support(self, name: str) -> SupportAbility | None:
        """Returns the support ability with the given name, if any."""
        return next((s for s in self.support_abilities if s.name == name), None)


class Enemy(Combatant):
    """An opponent, built from an encounter template."""

    VARIANT: ClassVar[CombatantType | None] = CombatantType.ENEMY
    kind: CombatantType = CombatantType.ENEMY
    template_key: str = Field(
        default="",
        description="Key of the template the enemy was built from.",
    )
    image: str = Field(
        default="",
        description="Asset reference, passed through for the presentation layer.",
    )
