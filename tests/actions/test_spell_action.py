"""
Tests for spell resolution and healing.
"""

import pytest
from skirmish.actions.abilities import SupportAbility
from skirmish.actions.spell_action import (
    cast_spell,
    resolve_healing,
    resolve_spell_attack,
)
from skirmish.actions.spells import Spell
from skirmish.character.combatant import Companion, Enemy
from skirmish.character.spellcasting import Spellcasting
from skirmish.core.constants import MessageCategory, SpellCategory, SupportKind
from skirmish.core.dice_parser import ScriptedDice
from skirmish.core.error_handling import ErrorKind


@pytest.fixture
def fire_bolt():
    return Spell(name="Fire Bolt", level=0, damage={"dice": "1d10"})


@pytest.fixture
def magic_missile():
    return Spell(
        name="Magic Missile",
        level=1,
        requires_attack_roll=False,
        damage={"dice": "3d4", "bonus": 3},
    )


@pytest.fixture
def cure_wounds():
    return Spell(
        name="Cure Wounds",
        level=1,
        category=SpellCategory.HEALING,
        healing={"dice": "1d8"},
        range=1,
    )


@pytest.fixture
def mage():
    # Level 1 (+2) with intelligence 16 (+3): spell attack +5.
    return Companion(
        name="Mage",
        level=1,
        max_hp=12,
        stats={"intelligence": 16},
        spellcasting=Spellcasting(
            ability="intelligence",
            slots={1: 2},
            known=["Magic Missile", "Cure Wounds"],
            prepared=["Magic Missile", "Cure Wounds"],
            cantrips=["Fire Bolt"],
        ),
    )


@pytest.fixture
def goblin():
    return Enemy(id="goblin", name="Goblin", max_hp=7, armor_class=15)


def test_spell_attack_hit(mage, fire_bolt, goblin):
    outcome = resolve_spell_attack(mage, fire_bolt, goblin, ScriptedDice([10, 7]))
    assert outcome.hit
    assert outcome.attack_total == 15
    assert outcome.damage == 7
    assert outcome.message.category == MessageCategory.SPELL_HIT


def test_spell_attack_miss(mage, fire_bolt, goblin):
    dice = ScriptedDice([9])
    outcome = resolve_spell_attack(mage, fire_bolt, goblin, dice)
    assert not outcome.hit
    assert outcome.damage == 0
    assert dice.remaining == 0


def test_spell_critical_doubles_damage(mage, fire_bolt, goblin):
    outcome = resolve_spell_attack(mage, fire_bolt, goblin, ScriptedDice([20, 5]))
    assert outcome.critical
    assert outcome.damage == 10
    assert outcome.message.category == MessageCategory.CRITICAL


def test_auto_hit_spell_rolls_no_d20(mage, magic_missile, goblin):
    """
    Test that a spell without attack roll hits for its damage plus bonus.
    """
    dice = ScriptedDice([1, 2, 3])
    outcome = resolve_spell_attack(mage, magic_missile, goblin, dice)
    assert outcome.hit
    assert outcome.attack_roll == 0
    assert outcome.damage == 9
    assert dice.remaining == 0


def test_spell_attack_needs_damage(mage, cure_wounds, goblin):
    with pytest.raises(ValueError):
        resolve_spell_attack(mage, cure_wounds, goblin, ScriptedDice([10]))


def test_cantrip_spends_no_slot(mage, fire_bolt, goblin):
    result = cast_spell(mage, fire_bolt, [goblin], ScriptedDice([12, 3]))
    assert result.success
    assert result.resources == []
    assert result.messages[0].category == MessageCategory.SPELL
    assert result.total_damage == 3


def test_leveled_spell_reports_the_slot(mage, magic_missile, goblin):
    result = cast_spell(mage, magic_missile, [goblin], ScriptedDice([4, 4, 4]))
    assert result.success
    assert result.total_damage == 15
    assert len(result.resources) == 1
    assert result.resources[0].caster_id == "companion"
    assert result.resources[0].slot_level == 1
    # The slot is spent by whoever applies the result.
    assert mage.spellcasting.slots[1] == 2


def test_lowest_available_slot_is_used(mage, magic_missile, goblin):
    mage.spellcasting.slots = {1: 0, 2: 1}
    result = cast_spell(mage, magic_missile, [goblin], ScriptedDice([1, 1, 1]))
    assert result.resources[0].slot_level == 2


def test_unprepared_spell_is_rejected(mage, goblin):
    sleep = Spell(name="Sleep", level=1, damage={"dice": "1d4"})
    result = cast_spell(mage, sleep, [goblin], ScriptedDice([]))
    assert not result.success
    assert result.error == ErrorKind.SPELL_NOT_PREPARED


def test_no_slot_left(mage, magic_missile, goblin):
    """
    Test that a leveled spell fails once every usable slot is spent.
    """
    mage.spellcasting.slots = {1: 0}
    result = cast_spell(mage, magic_missile, [goblin], ScriptedDice([]))
    assert not result.success
    assert result.error == ErrorKind.NO_SPELL_SLOT
    assert result.messages[0].category == MessageCategory.ERROR


def test_offensive_spell_on_fallen_targets(mage, fire_bolt, goblin):
    goblin.take_damage(7)
    dice = ScriptedDice([15, 4])
    result = cast_spell(mage, fire_bolt, [goblin], dice)
    assert not result.success
    assert result.error == ErrorKind.TARGET_DEFEATED
    assert dice.remaining == 2


def test_healing_spell_adds_the_modifier(mage, cure_wounds):
    mage.take_damage(10)
    result = cast_spell(mage, cure_wounds, [mage], ScriptedDice([4]))
    assert result.success
    assert result.healing[0].target_id == "companion"
    assert result.total_healing == 7
    assert result.messages[-1].category == MessageCategory.HEALING
    assert result.resources[0].slot_level == 1


def test_healing_is_at_least_one(cure_wounds):
    weakling = Companion(
        name="Weak",
        max_hp=5,
        stats={"intelligence": 4},
        spellcasting=Spellcasting(),
    )
    entry = resolve_healing(weakling, cure_wounds, weakling, ScriptedDice([1]))
    assert entry.amount == 1


def test_healing_from_ability_ignores_modifier(mage):
    ability = SupportAbility(name="Mend", kind=SupportKind.HEAL, dice="1d6+1")
    entry = resolve_healing(mage, ability, mage, ScriptedDice([3]))
    assert entry.amount == 4
