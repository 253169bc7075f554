"""
Core system module for the combat engine.

This module contains the fundamental components of the engine: constants and
enumerations, the die sources and damage descriptors, the error taxonomy and
console utilities.
"""

from .constants import (
    CombatantType,
    CombatOutcome,
    CombatPhase,
    MessageCategory,
    is_opponent,
)
from .dice_parser import (
    DiceRoller,
    FixedDice,
    ScriptedDice,
    parse_damage,
    roll_d20,
    roll_damage,
    roll_die,
)
from .error_handling import (
    CombatError,
    ConfigurationError,
    ErrorKind,
    InvalidActionError,
    Resolved,
)
from .utils import (
    ccapture,
    chebyshev_distance,
    cprint,
    crule,
    get_stat_modifier,
    make_bar,
)

__all__ = [
    # Import from constants.py
    "CombatantType",
    "CombatOutcome",
    "CombatPhase",
    "MessageCategory",
    "is_opponent",
    # Import from dice_parser.py
    "DiceRoller",
    "FixedDice",
    "ScriptedDice",
    "parse_damage",
    "roll_d20",
    "roll_damage",
    "roll_die",
    # Import from error_handling.py
    "CombatError",
    "ConfigurationError",
    "ErrorKind",
    "InvalidActionError",
    "Resolved",
    # Import from utils.py
    "ccapture",
    "chebyshev_distance",
    "cprint",
    "crule",
    "get_stat_modifier",
    "make_bar",
]
