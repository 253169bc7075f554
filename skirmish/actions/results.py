"""
Result records produced by the action resolvers.

Resolvers never touch hit points. They describe what should happen, and the
combat manager applies it in one place.
"""

from pydantic import BaseModel, Field

from skirmish.core.constants import EffectKind, MessageCategory
from skirmish.core.error_handling import ErrorKind


class CombatMessage(BaseModel):
    """A line of the narrative log."""

    text: str = Field(
        description="The narrative text.",
    )
    category: MessageCategory = Field(
        default=MessageCategory.INFO,
        description="Category used by the presentation layer.",
    )


class DamageEntry(BaseModel):
    """Damage to be dealt to a combatant."""

    target_id: str = Field(description="Id of the damaged combatant.")
    amount: int = Field(ge=0, description="Damage to deal.")


class HealingEntry(BaseModel):
    """Healing to be granted to a combatant."""

    target_id: str = Field(description="Id of the healed combatant.")
    amount: int = Field(ge=0, description="Hit points to restore.")


class AppliedEffect(BaseModel):
    """An effect placed on one or more combatants by a support action."""

    kind: EffectKind = Field(
        description="What the effect does.",
    )
    target_ids: list[str] = Field(
        default_factory=list,
        description="Ids of the affected combatants.",
    )
    source_id: str = Field(
        description="Id of the combatant that applied the effect.",
    )
    duration: int = Field(
        default=1,
        ge=0,
        description="Remaining turns of the source before the effect ends.",
    )


class ResourceUse(BaseModel):
    """A spell slot or a limited ability use spent by an action."""

    caster_id: str = Field(
        description="Id of the combatant spending the resource.",
    )
    slot_level: int | None = Field(
        default=None,
        description="Spell slot level spent, if any.",
    )
    ability_name: str | None = Field(
        default=None,
        description="Support ability whose use was spent, if any.",
    )


class AttackOutcome(BaseModel):
    """The resolution of a single attack or spell against one target."""

    target_id: str = Field(description="Id of the target.")
    hit: bool = Field(description="Whether the attack hit.")
    critical: bool = Field(default=False, description="Whether it was a natural 20.")
    attack_roll: int = Field(default=0, description="The d20 result, 0 if no roll.")
    attack_total: int = Field(default=0, description="The d20 plus the bonus.")
    damage: int = Field(default=0, ge=0, description="The damage dealt on a hit.")
    message: CombatMessage = Field(description="The narrative line.")


class ActionResult(BaseModel):
    """Everything an action wants to happen, in order."""

    damage: list[DamageEntry] = Field(default_factory=list)
    healing: list[HealingEntry] = Field(default_factory=list)
    messages: list[CombatMessage] = Field(default_factory=list)
    effects: list[AppliedEffect] = Field(default_factory=list)
    resources: list[ResourceUse] = Field(default_factory=list)
    success: bool = Field(
        default=True,
        description="False if the action was rejected or could not act.",
    )
    error: ErrorKind | None = Field(
        default=None,
        description="Why the action was rejected or degraded.",
    )

    @classmethod
    def failure(
        cls,
        text: str,
        error: ErrorKind,
        category: MessageCategory = MessageCategory.ERROR,
    ) -> "ActionResult":
        """
        Builds a result for an action that could not happen.

        Args:
            text (str): The narrative message.
            error (ErrorKind): The reason.
            category (MessageCategory): The message category.

        Returns:
            ActionResult: A failed result with a single message.

        """
        return cls(
            messages=[CombatMessage(text=text, category=category)],
            success=False,
            error=error,
        )

    def say(self, text: str, category: MessageCategory = MessageCategory.INFO) -> None:
        """Appends a narrative message."""
        self.messages.append(CombatMessage(text=text, category=category))

    def add_outcome(self, outcome: AttackOutcome) -> None:
        """Appends the message and, on a hit, the damage of an attack outcome."""
        self.messages.append(outcome.message)
        if outcome.hit:
            self.damage.append(
                DamageEntry(target_id=outcome.target_id, amount=outcome.damage)
            )

    def merge(self, other: "ActionResult") -> None:
        """Appends everything from another result, keeping the order."""
        self.damage.extend(other.damage)
        self.healing.extend(other.healing)
        self.messages.extend(other.messages)
        self.effects.extend(other.effects)
        self.resources.extend(other.resources)
        if other.error is not None and self.error is None:
            self.error = other.error

    @property
    def total_damage(self) -> int:
        return sum(entry.amount for entry in self.damage)

    @property
    def total_healing(self) -> int:
        return sum(entry.amount for entry in self.healing)
