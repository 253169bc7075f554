"""
Tests for the die sources and the damage descriptor parser.
"""

import pytest
from skirmish.core.dice_parser import (
    DiceRoller,
    FixedDice,
    ScriptedDice,
    average_damage,
    parse_damage,
    roll_d20,
    roll_damage,
    roll_die,
    try_roll_damage,
)
from skirmish.core.error_handling import ErrorKind


def test_roll_die_stays_in_range():
    """
    Test that a die roll is always between 1 and the number of sides.
    """
    dice = DiceRoller(seed=7)
    for sides in (1, 4, 6, 8, 10, 12, 20):
        for _ in range(200):
            assert 1 <= roll_die(sides, dice) <= sides


def test_roll_die_rejects_zero_sides():
    with pytest.raises(ValueError):
        DiceRoller(seed=1).roll(0)


def test_seeded_rolls_are_reproducible():
    """
    Test that two rollers with the same seed produce the same sequence.
    """
    first = DiceRoller(seed=42)
    second = DiceRoller(seed=42)
    assert [roll_d20(first) for _ in range(20)] == [roll_d20(second) for _ in range(20)]


def test_roll_damage_with_fixed_dice():
    """
    Test that "2d6+3" with every die showing 4 rolls exactly 11.
    """
    assert roll_damage("2d6+3", FixedDice(4)) == 11


def test_roll_damage_without_bonus():
    assert roll_damage("3d4", ScriptedDice([1, 2, 3])) == 6


def test_roll_damage_ignores_spaces():
    assert roll_damage("1d8 + 2", FixedDice(5)) == 7


@pytest.mark.parametrize("descriptor", ["", "d6", "2d", "2d6+", "2x6", "2d6-1", "abc", None, 12])
def test_roll_damage_invalid_descriptor_rolls_zero(descriptor):
    """
    Test that a descriptor not matching NdM(+B) rolls 0 without consuming dice.
    """
    dice = ScriptedDice([6, 6, 6])
    assert roll_damage(descriptor, dice) == 0
    assert dice.remaining == 3


def test_try_roll_damage_reports_invalid_dice():
    result = try_roll_damage("banana", FixedDice(3))
    assert result.value == 0
    assert result.error == ErrorKind.INVALID_DICE
    assert not result.ok


def test_try_roll_damage_success_is_ok():
    result = try_roll_damage("1d6+1", FixedDice(3))
    assert result.value == 4
    assert result.ok


def test_parse_damage_statistics():
    """
    Test that the parsed descriptor exposes its minimum, maximum and average.
    """
    parsed = parse_damage("2d6+3").value
    assert parsed is not None
    assert (parsed.count, parsed.sides, parsed.bonus) == (2, 6, 3)
    assert parsed.minimum == 5
    assert parsed.maximum == 15
    assert parsed.average == 10.0
    assert str(parsed) == "2d6+3"


def test_parse_damage_rejects_zero_dice_or_sides():
    assert parse_damage("0d6").error == ErrorKind.INVALID_DICE
    assert parse_damage("2d0").error == ErrorKind.INVALID_DICE


def test_large_descriptors_still_roll():
    assert roll_damage("1d1001", FixedDice(4)) == 4
    assert parse_damage("200d6").value.maximum == 1200


def test_average_damage_of_invalid_descriptor_is_zero():
    assert average_damage("nope") == 0.0
    assert average_damage("1d4") == 2.5


def test_scripted_dice_returns_rolls_in_order():
    dice = ScriptedDice([18, 5, 1])
    assert [dice.roll(20), dice.roll(8), dice.roll(4)] == [18, 5, 1]
    assert dice.remaining == 0
    with pytest.raises(RuntimeError):
        dice.roll(6)


def test_scripted_dice_choice_does_not_consume_rolls():
    dice = ScriptedDice([3])
    assert dice.choice(["a", "b"]) == "a"
    assert dice.remaining == 1


def test_choice_from_empty_sequence_fails():
    with pytest.raises(ValueError):
        DiceRoller(seed=3).choice([])
