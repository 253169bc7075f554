"""
Tests for the shared helpers: ability modifiers, proficiency and distance.
"""

import pytest
from skirmish.core.utils import (
    ccapture,
    chebyshev_distance,
    get_proficiency_bonus,
    get_stat_modifier,
    make_bar,
)


@pytest.mark.parametrize(
    "score, modifier",
    [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (12, 1), (15, 2), (20, 5), (30, 10)],
)
def test_stat_modifier(score, modifier):
    assert get_stat_modifier(score) == modifier


@pytest.mark.parametrize(
    "level, bonus",
    [(None, 2), (1, 2), (4, 2), (5, 3), (8, 3), (9, 4), (13, 5), (17, 6), (20, 6)],
)
def test_proficiency_bonus(level, bonus):
    assert get_proficiency_bonus(level) == bonus


def test_chebyshev_distance_counts_diagonals_as_one():
    assert chebyshev_distance(0, 0, 3, 3) == 3
    assert chebyshev_distance(1, 2, 4, 3) == 3
    assert chebyshev_distance(2, 2, 2, 2) == 0


def test_make_bar_fills_proportionally():
    bar = make_bar(5, 10, length=10)
    assert bar.count("▮") == 5
    assert bar.count("▯") == 5


def test_bar_renders_without_markup():
    rendered = ccapture(make_bar(3, 10, color="green"))
    assert "[green]" not in rendered
    assert rendered.count("▮") == 3
