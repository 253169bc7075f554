"""
Combat system module for the combat engine.

This module handles the encounter itself: initialization from templates, the
turn sequencer, the companion decision module, outcome detection and the
combat manager that ties them together.
"""

from .combat_manager import CombatManager
from .companion_ai import CompanionDecision, calculate_optimal_movement, choose_action
from .encounter import (
    EncounterSpec,
    EnemyGroup,
    create_enemies,
    initialize_combat,
    place_combatants,
    roll_initiative,
)
from .movement import GridMovementValidator, MovementValidator
from .narrative import ConsoleNarrativeSink, MemoryNarrativeSink, NarrativeSink
from .outcome import evaluate_outcome, evaluate_state
from .scheduler import AsyncioScheduler, ManualScheduler, TurnScheduler
from .state import CombatState, TurnEntry, TurnOrder
from .turn_sequencer import TurnSequencer

__all__ = [
    "CombatManager",
    "CompanionDecision",
    "calculate_optimal_movement",
    "choose_action",
    "EncounterSpec",
    "EnemyGroup",
    "create_enemies",
    "initialize_combat",
    "place_combatants",
    "roll_initiative",
    "GridMovementValidator",
    "MovementValidator",
    "ConsoleNarrativeSink",
    "MemoryNarrativeSink",
    "NarrativeSink",
    "evaluate_outcome",
    "evaluate_state",
    "AsyncioScheduler",
    "ManualScheduler",
    "TurnScheduler",
    "CombatState",
    "TurnEntry",
    "TurnOrder",
    "TurnSequencer",
]
