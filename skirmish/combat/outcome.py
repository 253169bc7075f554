"""
End-of-combat detection.
"""

from skirmish.character.combatant import Combatant
from skirmish.core.constants import CombatOutcome

from .state import CombatState


def evaluate_outcome(
    player: Combatant,
    companion: Combatant | None,
    enemies: list[Combatant],
) -> CombatOutcome:
    """
    Checks the victory and defeat conditions.

    Defeat is checked first, so a field where everybody is down is a defeat.

    Args:
        player (Combatant): The player.
        companion (Combatant | None): The companion, if any.
        enemies (list[Combatant]): The enemies.

    Returns:
        CombatOutcome: DEFEAT, VICTORY or CONTINUING.

    """
    if player.is_defeated() and (companion is None or companion.is_defeated()):
        return CombatOutcome.DEFEAT
    if all(enemy.is_defeated() for enemy in enemies):
        return CombatOutcome.VICTORY
    return CombatOutcome.CONTINUING


def evaluate_state(state: CombatState) -> CombatOutcome:
    """Evaluates the outcome of an encounter from its state."""
    return evaluate_outcome(state.player, state.companion, state.enemies)
