"""
Combat state module.

CombatState is the single object an encounter is made of. It is owned by the
combat manager and handed explicitly to every function that needs it.
"""

from pydantic import BaseModel, Field

from skirmish.actions.results import AppliedEffect, CombatMessage
from skirmish.actions.spells import Spell
from skirmish.character.combatant import Combatant, Companion, Enemy, Player, Position
from skirmish.core.constants import (
    GRID_COLUMNS,
    GRID_ROWS,
    CombatPhase,
    EffectKind,
    is_opponent,
)


class TurnEntry(BaseModel):
    """A combatant together with its initiative."""

    combatant: Combatant = Field(
        description="The combatant taking this turn.",
    )
    initiative: int = Field(
        description="The rolled initiative.",
    )


TurnOrder = list[TurnEntry]


class CombatState(BaseModel):
    """
    Everything that describes a running encounter.

    The turn order is fixed once rolled: entries are never reordered or
    removed, defeated combatants are only skipped.
    """

    player: Player = Field(
        description="The player character.",
    )
    companion: Companion | None = Field(
        default=None,
        description="The companion, if one joined the fight.",
    )
    enemies: list[Enemy] = Field(
        default_factory=list,
        description="The enemies of the encounter.",
    )
    turn_order: TurnOrder = Field(
        default_factory=list,
        description="Combatants sorted by initiative.",
    )
    current_turn_index: int = Field(
        default=0,
        ge=0,
        description="Index of the current entry of the turn order.",
    )
    positions: dict[str, Position] = Field(
        default_factory=dict,
        description="Battlefield position of each combatant, by id.",
    )
    grid_columns: int = Field(
        default=GRID_COLUMNS,
        description="Width of the battlefield grid.",
    )
    grid_rows: int = Field(
        default=GRID_ROWS,
        description="Height of the battlefield grid.",
    )
    phase: CombatPhase = Field(
        default=CombatPhase.SETUP,
        description="Current phase of the encounter.",
    )
    round_number: int = Field(
        default=1,
        ge=1,
        description="Current round, starting from 1.",
    )
    epoch: int = Field(
        default=0,
        ge=0,
        description="Teardown generation; bumped when the encounter ends.",
    )
    log: list[CombatMessage] = Field(
        default_factory=list,
        description="Append-only narrative log.",
    )
    active_effects: list[AppliedEffect] = Field(
        default_factory=list,
        description="Protect and taunt effects currently in place.",
    )
    spellbook: dict[str, Spell] = Field(
        default_factory=dict,
        description="Spells available to the casters, by name.",
    )

    # ============================================================================
    # COMBATANT QUERIES
    # ============================================================================

    @property
    def combatants(self) -> list[Combatant]:
        """Returns the player, the companion and the enemies."""
        allies: list[Combatant] = [self.player]
        if self.companion is not None:
            allies.append(self.companion)
        return allies + list(self.enemies)

    def get_combatant(self, combatant_id: str) -> Combatant | None:
        """Returns the combatant with the given id, if any."""
        return next((c for c in self.combatants if c.id == combatant_id), None)

    @property
    def current_entry(self) -> TurnEntry | None:
        if not self.turn_order:
            return None
        return self.turn_order[self.current_turn_index]

    @property
    def current_combatant(self) -> Combatant | None:
        entry = self.current_entry
        return entry.combatant if entry else None

    def living_enemies(self) -> list[Enemy]:
        return [enemy for enemy in self.enemies if enemy.is_alive()]

    def allies(self) -> list[Combatant]:
        """Returns the player and the companion, alive or not."""
        return [c for c in self.combatants if not is_opponent(c.kind, self.player.kind)]

    def living_opponents_of(self, combatant: Combatant) -> list[Combatant]:
        return [
            c
            for c in self.combatants
            if c.is_alive() and is_opponent(combatant.kind, c.kind)
        ]

    # ============================================================================
    # POSITIONS
    # ============================================================================

    def position_of(self, combatant_id: str) -> Position | None:
        return self.positions.get(combatant_id)

    def is_inside(self, position: Position) -> bool:
        """Returns True if the position lies on the grid."""
        return 0 <= position.x < self.grid_columns and 0 <= position.y < self.grid_rows

    def occupant(self, position: Position) -> Combatant | None:
        """Returns the living combatant standing on a square, if any."""
        for combatant_id, other in self.positions.items():
            if other.x == position.x and other.y == position.y:
                combatant = self.get_combatant(combatant_id)
                if combatant is not None and combatant.is_alive():
                    return combatant
        return None

    # ============================================================================
    # EFFECTS
    # ============================================================================

    def effects_on(self, combatant_id: str, kind: EffectKind) -> list[AppliedEffect]:
        """Returns the active effects of a kind that include a combatant."""
        return [
            effect
            for effect in self.active_effects
            if effect.kind == kind and combatant_id in effect.target_ids
        ]

    def is_protected(self, combatant_id: str) -> bool:
        return bool(self.effects_on(combatant_id, EffectKind.PROTECTED))

    def taunted_by(self, combatant_id: str) -> Combatant | None:
        """Returns the living combatant taunting the given one, if any."""
        for effect in self.effects_on(combatant_id, EffectKind.TAUNTED):
            source = self.get_combatant(effect.source_id)
            if source is not None and source.is_alive():
                return source
        return None
