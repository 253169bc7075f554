"""
Battlefield movement validation.

The engine never decides on its own whether a move is legal: it asks a
MovementValidator before accepting any position change.
"""

from typing import TYPE_CHECKING, Protocol

from catchery import log_debug

from skirmish.character.combatant import Combatant, Position
from skirmish.core.utils import chebyshev_distance

if TYPE_CHECKING:
    from .state import CombatState


class MovementValidator(Protocol):
    """Decides whether a combatant may move between two squares."""

    def is_valid_move(
        self,
        entity: Combatant,
        origin: Position,
        destination: Position,
        state: "CombatState",
    ) -> bool: ...


class GridMovementValidator:
    """
    Default validator: the destination must be on the grid, free of other
    living combatants and within the movement budget of the origin.
    """

    def __init__(self, budget: int = 3) -> None:
        self.budget = budget

    def is_valid_move(
        self,
        entity: Combatant,
        origin: Position,
        destination: Position,
        state: "CombatState",
    ) -> bool:
        if entity.is_defeated():
            log_debug(f"{entity.name} cannot move while defeated")
            return False
        if not state.is_inside(destination):
            return False
        if chebyshev_distance(origin.x, origin.y, destination.x, destination.y) > self.budget:
            return False
        occupant = state.occupant(destination)
        return occupant is None or occupant.id == entity.id
