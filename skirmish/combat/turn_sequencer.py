"""
Turn sequencer: the "whose turn is it" state machine.

    setup -> combat <-> {player-turn, companion-turn, enemy-turn} -> {victory, defeat}

``combat`` is the dispatch phase entered between two turns. Victory and
defeat are terminal: once reached, every transition is ignored.
"""

from collections.abc import Callable

from catchery import log_debug, log_warning

from skirmish.actions.results import CombatMessage
from skirmish.character.combatant import Combatant
from skirmish.core.constants import (
    CombatantType,
    CombatOutcome,
    CombatPhase,
    MessageCategory,
)

from .state import CombatState

# Phase entered for the turn of each combatant type.
TURN_PHASES: dict[CombatantType, CombatPhase] = {
    CombatantType.PLAYER: CombatPhase.PLAYER_TURN,
    CombatantType.COMPANION: CombatPhase.COMPANION_TURN,
    CombatantType.ENEMY: CombatPhase.ENEMY_TURN,
}

# Terminal phase reached for each final outcome.
TERMINAL_PHASES: dict[CombatOutcome, CombatPhase] = {
    CombatOutcome.VICTORY: CombatPhase.VICTORY,
    CombatOutcome.DEFEAT: CombatPhase.DEFEAT,
}


class TurnSequencer:
    """
    Moves the turn pointer of a combat state, skipping defeated combatants.

    Args:
        state (CombatState):
            The state to drive.
        on_exhausted (Callable[[CombatState], CombatOutcome] | None):
            Called when no living combatant is left in the turn order; its
            result forces the terminal phase. Without it the phase stays
            ``combat``.
        emit (Callable[[CombatMessage], None] | None):
            Receives the turn-start messages. Defaults to the state log.

    """

    def __init__(
        self,
        state: CombatState,
        on_exhausted: Callable[[CombatState], CombatOutcome] | None = None,
        emit: Callable[[CombatMessage], None] | None = None,
    ) -> None:
        self.state = state
        self.on_exhausted = on_exhausted
        self.emit = emit or state.log.append

    @property
    def is_over(self) -> bool:
        return self.state.phase.is_terminal

    def _step(self) -> None:
        """Moves the pointer to the next entry, counting the rounds."""
        state = self.state
        state.current_turn_index = (state.current_turn_index + 1) % len(state.turn_order)
        if state.current_turn_index == 0:
            state.round_number += 1

    def enter_combat(self) -> Combatant | None:
        """
        Enters the dispatch phase and hands the turn to the next living
        combatant, starting from the current index.

        Returns:
            Combatant | None:
                The combatant whose turn starts, or None if the encounter is
                over or nobody is left standing.

        """
        if self.is_over:
            return None
        state = self.state
        state.phase = CombatPhase.COMBAT
        if not state.turn_order:
            return self._exhausted()

        attempts = 0
        while attempts < len(state.turn_order):
            combatant = state.turn_order[state.current_turn_index].combatant
            if combatant.is_alive():
                state.phase = TURN_PHASES[combatant.kind]
                self.emit(
                    CombatMessage(
                        text=f"Round {state.round_number}: {combatant.name}'s turn.",
                        category=MessageCategory.TURN_START,
                    )
                )
                log_debug(f"Turn of {combatant.name} ({state.phase})")
                return combatant
            self._step()
            attempts += 1
        return self._exhausted()

    def advance_turn(self) -> Combatant | None:
        """
        Ends the current turn and starts the next one.

        Returns:
            Combatant | None: As for enter_combat.

        """
        if self.is_over:
            return None
        if self.state.turn_order:
            self._step()
        return self.enter_combat()

    def finish(self, outcome: CombatOutcome) -> None:
        """Moves to the terminal phase of a final outcome."""
        if self.is_over:
            return
        phase = TERMINAL_PHASES.get(outcome)
        if phase is not None:
            self.state.phase = phase

    def _exhausted(self) -> None:
        log_warning(
            "No living combatant left in the turn order",
            {"turn_order": [entry.combatant.id for entry in self.state.turn_order]},
        )
        if self.on_exhausted is not None:
            self.finish(self.on_exhausted(self.state))
        return None
