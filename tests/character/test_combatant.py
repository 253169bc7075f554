"""
Tests for the combatant records.
"""

import pytest
from skirmish.character.combatant import Companion, Enemy, Player
from skirmish.character.spellcasting import Spellcasting
from skirmish.core.constants import CombatantType


@pytest.fixture
def player():
    return Player(
        name="Hero",
        level=5,
        max_hp=30,
        armor_class=16,
        stats={"Strength": 16, "DEXTERITY": 12},
    )


def test_defaults(player):
    """
    Test that a new combatant starts at full health with a normalized stat block.
    """
    assert player.id == "player"
    assert player.kind == CombatantType.PLAYER
    assert player.hp == 30
    assert player.stats == {"strength": 16, "dexterity": 12}
    assert player.proficiency_bonus == 3


def test_modifier_of_missing_stat_is_none(player):
    assert player.modifier("strength") == 3
    assert player.modifier("wisdom") is None


def test_current_hp_is_clamped_on_creation():
    enemy = Enemy(id="e", name="E", max_hp=10, current_hp=25)
    assert enemy.hp == 10
    enemy = Enemy(id="e", name="E", max_hp=10, current_hp=-3)
    assert enemy.hp == 0
    assert enemy.is_defeated()


def test_take_damage_clamps_at_zero(player):
    """
    Test that damage never drives HP below zero and reports the HP lost.
    """
    assert player.take_damage(12) == 12
    assert player.hp == 18
    assert player.take_damage(100) == 18
    assert player.hp == 0
    assert player.is_defeated()
    assert player.take_damage(5) == 0
    assert player.hp == 0


def test_heal_clamps_at_max(player):
    """
    Test that healing never raises HP above max_hp and reports the HP restored.
    """
    player.take_damage(10)
    assert player.heal(4) == 4
    assert player.hp == 24
    assert player.heal(50) == 6
    assert player.hp == player.max_hp


def test_negative_amounts_are_ignored(player):
    player.take_damage(10)
    assert player.take_damage(-5) == 0
    assert player.heal(-5) == 0
    assert player.hp == 20


def test_hp_stays_within_bounds_after_any_sequence(player):
    for amount in (3, 50, 7, 100, 1, 0, 29, 31):
        player.take_damage(amount)
        assert 0 <= player.hp <= player.max_hp
        player.heal(amount // 2)
        assert 0 <= player.hp <= player.max_hp


def test_variant_kind_cannot_be_changed():
    with pytest.raises(ValueError):
        Player(name="Wrong", max_hp=10, kind=CombatantType.ENEMY)


def test_max_hp_must_be_positive():
    with pytest.raises(ValueError):
        Enemy(id="e", name="E", max_hp=0)


@pytest.mark.parametrize("stats", [{"luck": 10}, {"strength": 0}, {"strength": 31}])
def test_invalid_stats_are_rejected(stats):
    with pytest.raises(ValueError):
        Enemy(id="e", name="E", max_hp=5, stats=stats)


def test_companion_support_lookup():
    companion = Companion(
        name="Ally",
        max_hp=12,
        support_abilities=[{"name": "Guard", "kind": "protect"}],
    )
    assert companion.id == "companion"
    assert companion.get_support("Guard") is not None
    assert companion.get_support("Missing") is None


def test_prepared_spells_cannot_exceed_the_limit():
    """
    Test that a caster cannot be built with more prepared spells than
    ability modifier + level allows.
    """
    names = ["A", "B", "C", "D"]
    with pytest.raises(ValueError):
        Player(
            name="Hero",
            level=1,
            max_hp=10,
            stats={"intelligence": 10},
            spellcasting=Spellcasting(known=names, prepared=names),
        )
    mage = Player(
        name="Hero",
        level=1,
        max_hp=10,
        stats={"intelligence": 16},
        spellcasting=Spellcasting(known=names, prepared=names),
    )
    assert mage.spellcasting.prepared == names
