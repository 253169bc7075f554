"""
Tests for the companion support abilities.
"""

import pytest
from skirmish.actions.abilities import SupportAbility
from skirmish.actions.support_action import resolve_support
from skirmish.character.combatant import Companion, Enemy, Player
from skirmish.core.constants import EffectKind, MessageCategory, SupportKind
from skirmish.core.dice_parser import ScriptedDice
from skirmish.core.error_handling import ErrorKind


@pytest.fixture
def companion():
    return Companion(name="Ally", max_hp=15)


@pytest.fixture
def player():
    return Player(name="Hero", max_hp=20, current_hp=5)


@pytest.fixture
def enemies():
    return [
        Enemy(id="orc_0_0", name="Orc 1", max_hp=15),
        Enemy(id="orc_0_1", name="Orc 2", max_hp=15),
    ]


def test_heal(companion, player):
    ability = SupportAbility(name="Mend", kind=SupportKind.HEAL, dice="1d8+2", uses=2)
    result = resolve_support(companion, ability, [player], ScriptedDice([5]))
    assert result.success
    assert result.healing[0].target_id == "player"
    assert result.total_healing == 7
    assert result.messages[0].category == MessageCategory.HEALING
    assert result.resources[0].ability_name == "Mend"
    assert player.hp == 5


def test_protect_applies_an_effect(companion, player):
    ability = SupportAbility(name="Guard", kind=SupportKind.PROTECT, duration=2)
    result = resolve_support(companion, ability, [player])
    assert result.success
    assert len(result.effects) == 1
    effect = result.effects[0]
    assert effect.kind == EffectKind.PROTECTED
    assert effect.target_ids == ["player"]
    assert effect.source_id == "companion"
    assert effect.duration == 2
    assert result.messages[0].category == MessageCategory.SUPPORT


def test_taunt_covers_every_target(companion, enemies):
    """
    Test that a taunt marks every targeted enemy with the companion as source.
    """
    ability = SupportAbility(name="Provoke", kind=SupportKind.TAUNT)
    result = resolve_support(companion, ability, enemies)
    effect = result.effects[0]
    assert effect.kind == EffectKind.TAUNTED
    assert effect.target_ids == ["orc_0_0", "orc_0_1"]


def test_unlimited_ability_spends_nothing(companion, player):
    ability = SupportAbility(name="Guard", kind=SupportKind.PROTECT)
    assert resolve_support(companion, ability, [player]).resources == []


def test_exhausted_ability(companion, player):
    ability = SupportAbility(name="Mend", kind=SupportKind.HEAL, dice="1d4", uses=0)
    result = resolve_support(companion, ability, [player], ScriptedDice([]))
    assert not result.success
    assert result.error == ErrorKind.ABILITY_EXHAUSTED


def test_no_target(companion):
    ability = SupportAbility(name="Guard", kind=SupportKind.PROTECT)
    result = resolve_support(companion, ability, [])
    assert not result.success
    assert result.error == ErrorKind.NO_TARGET_SELECTED
