"""
Tests for the spellcasting block.
"""

import pytest
from skirmish.actions.spells import Spell
from skirmish.character.spellcasting import Spellcasting


@pytest.fixture
def fire_bolt():
    return Spell(name="Fire Bolt", level=0, damage={"dice": "1d10"})


@pytest.fixture
def burning_hands():
    return Spell(name="Burning Hands", level=1, damage={"dice": "3d6"})


@pytest.fixture
def scorching_ray():
    return Spell(name="Scorching Ray", level=2, damage={"dice": "2d6"})


@pytest.fixture
def book():
    return Spellcasting(
        ability="wisdom",
        slots={1: 1, 2: 0, 3: 1},
        known=["Burning Hands", "Scorching Ray", "Sleep"],
        prepared=["Burning Hands", "Scorching Ray"],
        cantrips=["Fire Bolt"],
    )


def test_prepared_must_be_known():
    with pytest.raises(ValueError):
        Spellcasting(known=["A"], prepared=["B"])


def test_unknown_ability_is_rejected():
    with pytest.raises(ValueError):
        Spellcasting(ability="luck")


def test_max_prepared_is_modifier_plus_level(book):
    assert book.max_prepared({"wisdom": 16}, 3) == 6
    assert book.max_prepared({"wisdom": 10}, 1) == 1


def test_max_prepared_is_zero_when_the_sum_is_negative(book):
    # wisdom 3 is -4, plus level 1.
    assert book.max_prepared({"wisdom": 3}, 1) == 0
    assert not book.prepare("Sleep", {"wisdom": 3}, 1)[0]


def test_prepare_respects_the_limit(book):
    """
    Test that preparing stops at ability modifier + level.
    """
    ok, message = book.prepare("Sleep", {"wisdom": 10}, 2)
    assert not ok
    assert "limit" in message
    ok, _ = book.prepare("Sleep", {"wisdom": 12}, 2)
    assert ok
    assert "Sleep" in book.prepared


def test_prepare_rejects_unknown_and_duplicates(book):
    assert book.prepare("Wish", {"wisdom": 20}, 20)[0] is False
    assert book.prepare("Burning Hands", {"wisdom": 20}, 20)[0] is False


def test_unprepare(book):
    assert book.unprepare("Burning Hands")[0] is True
    assert book.unprepare("Burning Hands")[0] is False


def test_cantrips_are_always_castable(book, fire_bolt):
    book.slots = {}
    assert book.can_cast(fire_bolt)


def test_lowest_available_slot_skips_empty_levels(book, scorching_ray, burning_hands):
    assert book.lowest_available_slot(1) == 1
    assert book.lowest_available_slot(2) == 3
    assert book.can_cast(scorching_ray)
    book.consume_slot(3)
    assert not book.can_cast(scorching_ray)
    assert book.can_cast(burning_hands)


def test_consume_slot(book):
    assert book.consume_slot(1)
    assert book.slots[1] == 0
    assert not book.consume_slot(1)
    assert not book.consume_slot(2)


def test_unprepared_spell_cannot_be_cast(book):
    sleep = Spell(name="Sleep", level=1, damage={"dice": "1d4"})
    assert not book.is_ready(sleep)
    assert not book.can_cast(sleep)
