"""
Tests for the companion decision module.
"""

import pytest
from skirmish.actions.abilities import SupportAbility
from skirmish.actions.attacks import Attack
from skirmish.actions.results import AppliedEffect
from skirmish.actions.spells import Spell
from skirmish.character.combatant import Companion, Enemy, Player, Position
from skirmish.character.spellcasting import Spellcasting
from skirmish.combat.companion_ai import (
    CompanionDecision,
    calculate_optimal_movement,
    choose_action,
    nearest_enemy,
)
from skirmish.combat.movement import GridMovementValidator
from skirmish.combat.state import CombatState
from skirmish.core.constants import ActionType, EffectKind, SpellCategory, SupportKind
from skirmish.core.settings import CombatSettings
from skirmish.core.utils import chebyshev_distance


@pytest.fixture
def spellbook():
    spells = [
        Spell(name="Fire Bolt", level=0, damage={"dice": "1d10"}),
        Spell(
            name="Magic Missile",
            level=1,
            requires_attack_roll=False,
            damage={"dice": "3d4", "bonus": 3},
        ),
        Spell(
            name="Cure Wounds",
            level=1,
            category=SpellCategory.HEALING,
            healing={"dice": "1d8"},
            range=1,
        ),
    ]
    return {spell.name: spell for spell in spells}


@pytest.fixture
def companion():
    return Companion(
        name="Ally",
        max_hp=20,
        stats={"intelligence": 16},
        attacks=[
            Attack(name="Staff", damage="1d6"),
            Attack(name="Sling", damage="1d4", range_category="ranged", range=6),
        ],
        spellcasting=Spellcasting(
            slots={1: 2},
            known=["Magic Missile", "Cure Wounds"],
            prepared=["Magic Missile", "Cure Wounds"],
            cantrips=["Fire Bolt"],
        ),
        support_abilities=[
            SupportAbility(name="Mend", kind=SupportKind.HEAL, dice="1d6", uses=1),
            SupportAbility(name="Guard", kind=SupportKind.PROTECT),
            SupportAbility(name="Provoke", kind=SupportKind.TAUNT),
        ],
    )


@pytest.fixture
def state(companion, spellbook):
    enemies = [
        Enemy(id="far", name="Far Goblin", max_hp=7),
        Enemy(id="near", name="Near Goblin", max_hp=7),
    ]
    return CombatState(
        player=Player(name="Hero", max_hp=30),
        companion=companion,
        enemies=enemies,
        positions={
            "player": Position(x=1, y=2),
            "companion": Position(x=0, y=2),
            "far": Position(x=7, y=5),
            "near": Position(x=5, y=2),
        },
        spellbook=spellbook,
    )


def _no_spells(companion):
    companion.spellcasting = None


# =============================================================================
# Priorities
# =============================================================================


def test_heals_wounded_ally_with_a_spell(state):
    """
    Test that an ally under the threshold is healed before anything else.
    """
    state.player.take_damage(25)
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.HEAL_SUPPORT
    assert decision.spell.name == "Cure Wounds"
    assert decision.target is state.player


def test_heals_the_lowest_hp_ally(state):
    state.player.take_damage(25)
    state.companion.take_damage(18)
    decision = choose_action(state.companion, state)
    assert decision.target is state.companion


def test_downed_ally_can_be_healed(state):
    state.player.take_damage(100)
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.HEAL_SUPPORT
    assert decision.target is state.player


def test_heals_with_ability_without_slots(state):
    state.companion.spellcasting.slots = {1: 0}
    state.player.take_damage(25)
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.HEAL_SUPPORT
    assert decision.spell is None
    assert decision.ability.name == "Mend"


def test_no_healing_left_falls_through_to_offense(state):
    state.companion.spellcasting.slots = {1: 0}
    state.companion.get_support("Mend").uses = 0
    state.player.take_damage(25)
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.SPELL
    assert decision.spell.name == "Fire Bolt"


def test_casts_the_strongest_offensive_spell(state):
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.SPELL
    assert decision.spell.name == "Magic Missile"
    assert decision.target.id == "near"


def test_threshold_comes_from_settings(state):
    state.player.take_damage(10)
    decision = choose_action(state.companion, state, CombatSettings(low_hp_threshold=0.9))
    assert decision.type == ActionType.HEAL_SUPPORT


def test_attacks_with_ranged_when_not_adjacent(state):
    _no_spells(state.companion)
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.ATTACK
    assert decision.attack.name == "Sling"
    assert decision.target.id == "near"


def test_attacks_with_melee_when_adjacent(state):
    _no_spells(state.companion)
    state.positions["near"] = Position(x=1, y=3)
    decision = choose_action(state.companion, state)
    assert decision.attack.name == "Staff"


def test_protects_the_player_without_offense(state):
    _no_spells(state.companion)
    state.companion.attacks = []
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.PROTECT
    assert decision.targets == [state.player]


def test_taunts_when_the_player_is_already_protected(state):
    _no_spells(state.companion)
    state.companion.attacks = []
    state.active_effects.append(
        AppliedEffect(kind=EffectKind.PROTECTED, target_ids=["player"], source_id="companion")
    )
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.TAUNT
    assert [t.id for t in decision.targets] == ["far", "near"]


def test_nothing_to_do(state):
    _no_spells(state.companion)
    state.companion.attacks = []
    state.companion.support_abilities = []
    decision = choose_action(state.companion, state)
    assert decision.type == ActionType.NONE
    assert decision.target is None


def test_decision_does_not_change_the_state(state):
    state.player.take_damage(25)
    before = state.model_dump()
    choose_action(state.companion, state)
    assert state.model_dump() == before


# =============================================================================
# Targets and movement
# =============================================================================


def test_nearest_enemy_ignores_the_fallen(state):
    assert nearest_enemy(state.companion, state).id == "near"
    state.enemies[1].take_damage(100)
    assert nearest_enemy(state.companion, state).id == "far"
    state.enemies[0].take_damage(100)
    assert nearest_enemy(state.companion, state) is None


def test_nearest_enemy_tie_keeps_the_first(state):
    state.positions["far"] = Position(x=5, y=0)
    assert nearest_enemy(state.companion, state).id == "far"


def test_no_movement_when_in_range(state):
    decision = choose_action(state.companion, state)
    validator = GridMovementValidator(3)
    assert calculate_optimal_movement(state.companion, decision, state, validator, 3) is None


def test_moves_into_range_with_fewest_steps(state):
    """
    Test that the companion walks just far enough to reach its target.
    """
    _no_spells(state.companion)
    state.companion.attacks = [Attack(name="Staff", damage="1d6")]
    state.positions["near"] = Position(x=4, y=2)
    decision = choose_action(state.companion, state)
    validator = GridMovementValidator(3)
    destination = calculate_optimal_movement(state.companion, decision, state, validator, 3)
    assert destination is not None
    assert chebyshev_distance(destination.x, destination.y, 4, 2) <= 1
    assert chebyshev_distance(0, 2, destination.x, destination.y) == 3


def test_moves_closer_when_range_cannot_be_reached(state):
    _no_spells(state.companion)
    state.companion.attacks = [Attack(name="Staff", damage="1d6")]
    decision = choose_action(state.companion, state)
    validator = GridMovementValidator(3)
    destination = calculate_optimal_movement(state.companion, decision, state, validator, 3)
    assert destination is not None
    assert chebyshev_distance(destination.x, destination.y, 5, 2) == 2
    assert state.occupant(destination) is None


def test_ties_keep_the_companion_on_its_row(state):
    """
    Test that among equally good squares the companion stays on its row.
    """
    near = state.get_combatant("near")
    state.positions["near"] = Position(x=7, y=2)
    staff = Attack(name="Staff", damage="1d6")
    decision = CompanionDecision(type=ActionType.ATTACK, attack=staff, targets=[near])
    validator = GridMovementValidator(3)
    destination = calculate_optimal_movement(state.companion, decision, state, validator, 3)
    assert destination == Position(x=3, y=2)

    state.positions["near"] = Position(x=4, y=2)
    destination = calculate_optimal_movement(state.companion, decision, state, validator, 3)
    assert destination == Position(x=3, y=2)


def test_no_movement_without_budget(state):
    _no_spells(state.companion)
    state.companion.attacks = [Attack(name="Staff", damage="1d6")]
    decision = choose_action(state.companion, state)
    validator = GridMovementValidator(3)
    assert calculate_optimal_movement(state.companion, decision, state, validator, 0) is None
