"""
Companion decision module.

Chooses what the companion does on its turn. The policy is a behaviour tree
selector, tried in priority order:

    1. heal the lowest-HP ally under the low-HP threshold (spell, then ability)
    2. cast the castable offensive spell with the highest average damage
    3. attack the nearest living enemy (melee when adjacent, ranged otherwise)
    4. protect the player, then taunt the enemies
    5. do nothing

The decision never mutates the state: the combat manager resolves it.
"""

from typing import Any

from pydantic import BaseModel, Field

from skirmish.actions.abilities import SupportAbility
from skirmish.actions.attacks import Attack
from skirmish.actions.spells import Spell
from skirmish.character.combatant import Combatant, Companion, Position
from skirmish.core.constants import ActionType, SpellCategory, SupportKind
from skirmish.core.settings import CombatSettings
from skirmish.core.utils import chebyshev_distance

from .behaviour_tree import Action, BTStatus, Condition, Selector, Sequence
from .movement import MovementValidator
from .state import CombatState

# Distance used when a combatant has no position on the grid.
UNKNOWN_DISTANCE = 1_000


class CompanionDecision(BaseModel):
    """The action chosen by the companion."""

    type: ActionType = Field(
        default=ActionType.NONE,
        description="The kind of action.",
    )
    attack: Attack | None = Field(
        default=None,
        description="The attack to make, for attack decisions.",
    )
    spell: Spell | None = Field(
        default=None,
        description="The spell to cast, for spell and spell-heal decisions.",
    )
    ability: SupportAbility | None = Field(
        default=None,
        description="The support ability to use.",
    )
    targets: list[Combatant] = Field(
        default_factory=list,
        description="The chosen targets.",
    )

    @property
    def target(self) -> Combatant | None:
        return self.targets[0] if self.targets else None

    @property
    def effective_range(self) -> int | None:
        """Returns the range of the chosen attack, spell or ability."""
        for source in (self.attack, self.spell, self.ability):
            if source is not None:
                return source.range
        return None


# =============================================================================
# Support Functions
# =============================================================================


def distance_between(state: CombatState, first_id: str, second_id: str) -> int:
    """Returns the Chebyshev distance between two combatants."""
    first = state.position_of(first_id)
    second = state.position_of(second_id)
    if first is None or second is None:
        return UNKNOWN_DISTANCE
    return chebyshev_distance(first.x, first.y, second.x, second.y)


def nearest_enemy(companion: Combatant, state: CombatState) -> Combatant | None:
    """
    Returns the nearest living enemy, the first one found on ties.

    Args:
        companion (Combatant): The combatant looking for a target.
        state (CombatState): The combat state.

    Returns:
        Combatant | None: The target, or None if every enemy is down.

    """
    enemies = state.living_opponents_of(companion)
    if not enemies:
        return None
    return min(enemies, key=lambda enemy: distance_between(state, companion.id, enemy.id))


def _castable_spells(
    companion: Combatant, state: CombatState, category: SpellCategory
) -> list[Spell]:
    """Returns the ready and affordable spells of a category, in book order."""
    book = companion.spellcasting
    if book is None:
        return []
    spells: list[Spell] = []
    for name in book.cantrips + book.prepared:
        spell = state.spellbook.get(name)
        if spell and spell.category == category and book.can_cast(spell):
            spells.append(spell)
    return spells


def _support(companion: Combatant, kind: SupportKind) -> SupportAbility | None:
    if not isinstance(companion, Companion):
        return None
    return next(
        (
            ability
            for ability in companion.support_abilities
            if ability.kind == kind and ability.is_available()
        ),
        None,
    )


def _decide(ctx: dict[str, Any], decision: CompanionDecision) -> BTStatus:
    ctx["bb"]["decision"] = decision
    return BTStatus.SUCCESS


# =============================================================================
# Behaviour Tree Leaves
# =============================================================================


def ally_needs_healing(ctx: dict[str, Any]) -> bool:
    state: CombatState = ctx["state"]
    settings: CombatSettings = ctx["settings"]
    wounded = [a for a in state.allies() if a.hp_ratio < settings.low_hp_threshold]
    if not wounded:
        return False
    ctx["bb"]["heal_target"] = min(wounded, key=lambda ally: ally.hp)
    return True


def heal_with_spell(ctx: dict[str, Any]) -> BTStatus:
    spells = _castable_spells(ctx["self"], ctx["state"], SpellCategory.HEALING)
    if not spells:
        return BTStatus.FAILURE
    return _decide(
        ctx,
        CompanionDecision(
            type=ActionType.HEAL_SUPPORT,
            spell=spells[0],
            targets=[ctx["bb"]["heal_target"]],
        ),
    )


def heal_with_ability(ctx: dict[str, Any]) -> BTStatus:
    ability = _support(ctx["self"], SupportKind.HEAL)
    if ability is None:
        return BTStatus.FAILURE
    return _decide(
        ctx,
        CompanionDecision(
            type=ActionType.HEAL_SUPPORT,
            ability=ability,
            targets=[ctx["bb"]["heal_target"]],
        ),
    )


def cast_offensive_spell(ctx: dict[str, Any]) -> BTStatus:
    companion = ctx["self"]
    target = nearest_enemy(companion, ctx["state"])
    if target is None:
        return BTStatus.FAILURE
    spells = _castable_spells(companion, ctx["state"], SpellCategory.OFFENSIVE)
    if not spells:
        return BTStatus.FAILURE
    spell = max(spells, key=lambda s: s.average_damage)
    return _decide(
        ctx, CompanionDecision(type=ActionType.SPELL, spell=spell, targets=[target])
    )


def attack_nearest(ctx: dict[str, Any]) -> BTStatus:
    companion: Combatant = ctx["self"]
    if not companion.attacks:
        return BTStatus.FAILURE
    target = nearest_enemy(companion, ctx["state"])
    if target is None:
        return BTStatus.FAILURE
    adjacent = distance_between(ctx["state"], companion.id, target.id) <= 1
    melee = [attack for attack in companion.attacks if not attack.is_ranged]
    ranged = [attack for attack in companion.attacks if attack.is_ranged]
    preferred = melee if adjacent else ranged
    attack = (preferred or companion.attacks)[0]
    return _decide(
        ctx, CompanionDecision(type=ActionType.ATTACK, attack=attack, targets=[target])
    )


def protect_player(ctx: dict[str, Any]) -> BTStatus:
    state: CombatState = ctx["state"]
    ability = _support(ctx["self"], SupportKind.PROTECT)
    if ability is None or state.player.is_defeated() or state.is_protected(state.player.id):
        return BTStatus.FAILURE
    return _decide(
        ctx,
        CompanionDecision(
            type=ActionType.PROTECT, ability=ability, targets=[state.player]
        ),
    )


def taunt_enemies(ctx: dict[str, Any]) -> BTStatus:
    ability = _support(ctx["self"], SupportKind.TAUNT)
    enemies = ctx["state"].living_opponents_of(ctx["self"])
    if ability is None or not enemies:
        return BTStatus.FAILURE
    return _decide(
        ctx, CompanionDecision(type=ActionType.TAUNT, ability=ability, targets=enemies)
    )


COND_ALLY_WOUNDED = Condition(ally_needs_healing, "Ally Wounded?")

ACT_HEAL_WITH_SPELL = Action(heal_with_spell, "Heal With Spell")
ACT_HEAL_WITH_ABILITY = Action(heal_with_ability, "Heal With Ability")
ACT_CAST_OFFENSIVE_SPELL = Action(cast_offensive_spell, "Cast Offensive Spell")
ACT_ATTACK_NEAREST = Action(attack_nearest, "Attack Nearest")
ACT_PROTECT_PLAYER = Action(protect_player, "Protect Player")
ACT_TAUNT_ENEMIES = Action(taunt_enemies, "Taunt Enemies")

COMPANION_TREE = Selector(
    Sequence(
        COND_ALLY_WOUNDED,
        Selector(ACT_HEAL_WITH_SPELL, ACT_HEAL_WITH_ABILITY, name="heal"),
        name="heal ally",
    ),
    ACT_CAST_OFFENSIVE_SPELL,
    ACT_ATTACK_NEAREST,
    Selector(ACT_PROTECT_PLAYER, ACT_TAUNT_ENEMIES, name="support"),
    name="companion",
)


# =============================================================================
# Entry Points
# =============================================================================


def choose_action(
    companion: Combatant,
    state: CombatState,
    settings: CombatSettings | None = None,
) -> CompanionDecision:
    """
    Chooses the action of the companion for this turn.

    Args:
        companion (Combatant): The companion.
        state (CombatState): The combat state, read only.
        settings (CombatSettings | None): Thresholds; defaults if None.

    Returns:
        CompanionDecision: The decision; type NONE if nothing applies.

    """
    ctx: dict[str, Any] = {
        "self": companion,
        "state": state,
        "settings": settings or CombatSettings(),
        "bb": {},
    }
    COMPANION_TREE.tick(ctx)
    return ctx["bb"].get("decision") or CompanionDecision()


def calculate_optimal_movement(
    companion: Combatant,
    decision: CompanionDecision,
    state: CombatState,
    validator: MovementValidator,
    budget: int,
) -> Position | None:
    """
    Finds where the companion should move to act on its decision.

    Among the squares the validator accepts, the one needing the fewest steps
    that puts the target within the effective range is chosen. When no such
    square exists, the valid square closest to the target is chosen instead,
    provided it is closer than the current one. Ties go to the square that
    strays least from the starting row.

    Args:
        companion (Combatant): The companion.
        decision (CompanionDecision): The chosen action.
        state (CombatState): The combat state.
        validator (MovementValidator): The movement validator.
        budget (int): Maximum number of steps.

    Returns:
        Position | None:
            The destination, or None when already in range or when no valid
            square improves the situation.

    """
    target = decision.target
    reach = decision.effective_range
    origin = state.position_of(companion.id)
    if target is None or reach is None or origin is None or budget <= 0:
        return None
    goal = state.position_of(target.id)
    if goal is None:
        return None
    current = chebyshev_distance(origin.x, origin.y, goal.x, goal.y)
    if current <= reach:
        return None

    best: tuple[tuple[int, int, int], Position] | None = None
    for y in range(state.grid_rows):
        for x in range(state.grid_columns):
            steps = chebyshev_distance(origin.x, origin.y, x, y)
            if steps == 0 or steps > budget:
                continue
            candidate = Position(x=x, y=y)
            if not validator.is_valid_move(companion, origin, candidate, state):
                continue
            remaining = chebyshev_distance(x, y, goal.x, goal.y)
            # In-range squares first, by steps; then the others, by distance.
            # Ties keep the companion closest to its own row.
            drift = abs(y - origin.y)
            key = (0, steps, drift) if remaining <= reach else (1, remaining, drift)
            if best is None or key < best[0]:
                best = (key, candidate)

    if best is None:
        return None
    key, destination = best
    if key[0] == 1 and key[1] >= current:
        return None
    return destination
