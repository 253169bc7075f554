"""
Tests for weapon and natural attack resolution.
"""

import pytest
from skirmish.actions.attack_action import (
    execute_attack,
    resolve_attack,
    resolve_entity_attack,
)
from skirmish.actions.attacks import Attack
from skirmish.character.combatant import Enemy, Player
from skirmish.core.constants import MessageCategory
from skirmish.core.dice_parser import ScriptedDice
from skirmish.core.error_handling import ErrorKind


@pytest.fixture
def player():
    # Level 1 (+2) with strength 10 (+0).
    return Player(name="Hero", level=1, max_hp=20, stats={"strength": 10})


@pytest.fixture
def sword():
    return Attack(name="Sword", damage="1d8+2", attack_bonus=3)


@pytest.fixture
def goblin():
    return Enemy(id="goblin_0_0", name="Goblin", max_hp=7, armor_class=15)


def test_hit_deals_rolled_damage(player, sword, goblin):
    """
    Test that 18 + 3 against AC 15 hits for 1d8+2 with the next die.
    """
    dice = ScriptedDice([18, 5])
    result = resolve_entity_attack(player, sword, goblin, dice)
    assert result.success
    assert len(result.damage) == 1
    assert result.damage[0].target_id == "goblin_0_0"
    assert result.damage[0].amount == 7
    assert result.messages[0].category == MessageCategory.HIT
    assert dice.remaining == 0
    # Resolution never touches hit points.
    assert goblin.hp == 7


def test_total_equal_to_armor_class_hits(player, sword, goblin):
    outcome = resolve_attack(player, sword, goblin, ScriptedDice([12, 1]))
    assert outcome.hit
    assert outcome.attack_total == 15


def test_miss_deals_no_damage(player, sword, goblin):
    dice = ScriptedDice([11])
    result = resolve_entity_attack(player, sword, goblin, dice)
    assert result.success
    assert result.damage == []
    assert result.messages[0].category == MessageCategory.MISS
    assert dice.remaining == 0


def test_natural_twenty_doubles_the_total(player, sword):
    """
    Test that a natural 20 hits any armor class and doubles the damage total.
    """
    dragon = Enemy(id="dragon", name="Dragon", max_hp=200, armor_class=30)
    outcome = resolve_attack(player, sword, dragon, ScriptedDice([20, 6]))
    assert outcome.hit
    assert outcome.critical
    assert outcome.damage == (6 + 2) * 2
    assert outcome.message.category == MessageCategory.CRITICAL
    assert outcome.message.text.startswith("Critical hit!")


def test_natural_one_with_big_bonus_still_hits(player, goblin):
    attack = Attack(name="Huge Club", damage="1d4", attack_bonus=20)
    assert resolve_attack(player, attack, goblin, ScriptedDice([1, 1])).hit


def test_ac_bonus_raises_the_threshold(player, sword, goblin):
    outcome = resolve_attack(player, sword, goblin, ScriptedDice([13]), ac_bonus=2)
    assert not outcome.hit


def test_defeated_target_consumes_no_roll(player, sword, goblin):
    """
    Test that attacking a fallen target is rejected before any die is rolled.
    """
    goblin.take_damage(100)
    dice = ScriptedDice([18, 5])
    result = resolve_entity_attack(player, sword, goblin, dice)
    assert not result.success
    assert result.error == ErrorKind.TARGET_DEFEATED
    assert result.messages[0].category == MessageCategory.INFO
    assert dice.remaining == 2


def test_non_numeric_armor_class_is_rejected(player, sword, goblin):
    goblin.armor_class = "tough"
    dice = ScriptedDice([18])
    result = resolve_entity_attack(player, sword, goblin, dice)
    assert not result.success
    assert result.error == ErrorKind.NON_NUMERIC_BONUS
    assert dice.remaining == 1


def test_missing_stat_is_reported_but_resolved(goblin):
    slime = Enemy(id="slime", name="Slime", max_hp=5)
    attack = Attack(name="Pseudopod", damage="1d4")
    result = resolve_entity_attack(slime, attack, goblin, ScriptedDice([13, 3]))
    assert result.success
    assert result.error == ErrorKind.MISSING_STAT
    assert result.total_damage == 3


def test_execute_attack_resolves_each_target_in_order(player, sword, goblin):
    wolf = Enemy(id="wolf_1_0", name="Wolf", max_hp=11, armor_class=13)
    dice = ScriptedDice([18, 4, 5])
    result = execute_attack(player, sword, [goblin, wolf], dice)
    assert result.success
    assert [entry.target_id for entry in result.damage] == ["goblin_0_0"]
    assert result.total_damage == 6
    assert len(result.messages) == 2


def test_execute_attack_skips_fallen_targets(player, sword, goblin):
    goblin.take_damage(7)
    result = execute_attack(player, sword, [goblin], ScriptedDice([]))
    assert not result.success
    assert result.error == ErrorKind.TARGET_DEFEATED
