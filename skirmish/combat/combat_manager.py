"""
Turn orchestrator.

The CombatManager owns the combat state of one encounter and drives it:
player turns wait for the presentation layer to submit an action, companion
and enemy turns resolve on their own after a presentation delay. Every result
is applied here and nowhere else, and the outcome is checked after each of
them.
"""

from collections.abc import Callable

from catchery import log_critical, log_debug, log_error, log_warning

from skirmish.actions.attack_action import resolve_entity_attack
from skirmish.actions.player_action import PlayerAction, execute_player_action
from skirmish.actions.results import ActionResult, CombatMessage
from skirmish.actions.spell_action import cast_spell
from skirmish.actions.support_action import resolve_support
from skirmish.character.combatant import Combatant, Companion, Position
from skirmish.character.store import CharacterStore
from skirmish.core.constants import (
    ActionType,
    CombatantType,
    CombatOutcome,
    CombatPhase,
    MessageCategory,
)
from skirmish.core.content import ContentRepository
from skirmish.core.dice_parser import DiceRoller, default_dice
from skirmish.core.error_handling import (
    ErrorKind,
    ErrorSeverity,
    InvalidActionError,
)
from skirmish.core.settings import CombatSettings
from skirmish.core.utils import chebyshev_distance

from .companion_ai import (
    CompanionDecision,
    calculate_optimal_movement,
    choose_action,
    distance_between,
)
from .encounter import EncounterSpec, initialize_combat
from .movement import GridMovementValidator, MovementValidator
from .narrative import MemoryNarrativeSink, NarrativeSink
from .outcome import evaluate_state
from .scheduler import ManualScheduler, TurnScheduler
from .state import CombatState
from .turn_sequencer import TurnSequencer

DecisionFunction = Callable[
    [Combatant, CombatState, CombatSettings], CompanionDecision
]


class CombatManager:
    """
    Manages the flow of one encounter.

    Args:
        state (CombatState):
            The state built by initialize_combat, in the setup phase.
        store (CharacterStore | None):
            Where the player and companion are written back when the
            encounter ends.
        scheduler (TurnScheduler | None):
            Runs the deferred continuations. Defaults to a ManualScheduler.
        sink (NarrativeSink | None):
            Receives every narrative message. Defaults to a memory sink.
        dice (DiceRoller | None):
            The die source. Defaults to an unseeded one.
        settings (CombatSettings | None):
            Delays and thresholds.
        validator (MovementValidator | None):
            Decides movement legality. Defaults to a GridMovementValidator.
        decide (DecisionFunction | None):
            The companion decision function.

    """

    def __init__(
        self,
        state: CombatState,
        store: CharacterStore | None = None,
        scheduler: TurnScheduler | None = None,
        sink: NarrativeSink | None = None,
        dice: DiceRoller | None = None,
        settings: CombatSettings | None = None,
        validator: MovementValidator | None = None,
        decide: DecisionFunction | None = None,
    ) -> None:
        self.state = state
        self.store = store
        self.settings = settings or CombatSettings()
        self.scheduler: TurnScheduler = scheduler or ManualScheduler()
        self.sink: NarrativeSink = sink or MemoryNarrativeSink()
        self.dice = dice or default_dice()
        self.validator: MovementValidator = validator or GridMovementValidator(
            self.settings.movement_budget
        )
        self.decide: DecisionFunction = decide or choose_action
        self.sequencer = TurnSequencer(state, on_exhausted=evaluate_state, emit=self._emit)
        # Every result applied or rejected, in order.
        self.history: list[ActionResult] = []
        self.outcome: CombatOutcome = CombatOutcome.CONTINUING
        self._finished = False
        self._torn_down = False
        self._acted = False
        self._movement_used = 0
        self._turn_handlers: dict[CombatantType, Callable[[Combatant], None]] = {
            CombatantType.PLAYER: self._start_player_turn,
            CombatantType.COMPANION: self._start_companion_turn,
            CombatantType.ENEMY: self._start_enemy_turn,
        }
        self._decision_handlers: dict[
            ActionType, Callable[[Combatant, CompanionDecision], ActionResult]
        ] = {
            ActionType.ATTACK: self._resolve_attack_decision,
            ActionType.SPELL: self._resolve_spell_decision,
            ActionType.HEAL_SUPPORT: self._resolve_heal_decision,
            ActionType.PROTECT: self._resolve_support_decision,
            ActionType.TAUNT: self._resolve_support_decision,
        }

    @classmethod
    def from_store(
        cls,
        store: CharacterStore,
        encounter: EncounterSpec,
        repository: ContentRepository,
        **kwargs,
    ) -> "CombatManager":
        """
        Builds an encounter from the records of a character store.

        Args:
            store (CharacterStore): Provides the player and the companion.
            encounter (EncounterSpec): The encounter description.
            repository (ContentRepository): The template registry.
            **kwargs: Forwarded to the constructor.

        Returns:
            CombatManager: The manager, ready to start.

        Raises:
            ConfigurationError: If the encounter cannot be built.

        """
        settings: CombatSettings = kwargs.get("settings") or CombatSettings()
        dice = kwargs.get("dice")
        state = initialize_combat(
            store.load_player(),
            store.load_companion(),
            encounter,
            repository,
            dice,
            settings.grid_columns,
            settings.grid_rows,
        )
        return cls(state, store=store, **kwargs)

    # ============================================================================
    # STATUS
    # ============================================================================

    @property
    def phase(self) -> CombatPhase:
        return self.state.phase

    @property
    def current_combatant(self) -> Combatant | None:
        return self.state.current_combatant

    @property
    def is_over(self) -> bool:
        return self._finished or self._torn_down

    # ============================================================================
    # ENCOUNTER LIFECYCLE
    # ============================================================================

    def start(self) -> None:
        """
        Starts the encounter and hands the first turn out.

        Raises:
            InvalidActionError: If the encounter was already started.

        """
        if self.state.phase != CombatPhase.SETUP or self.is_over:
            raise InvalidActionError(
                "The encounter was already started",
                {"phase": self.state.phase},
            )
        names = ", ".join(
            f"{entry.combatant.name} ({entry.initiative})"
            for entry in self.state.turn_order
        )
        self._emit(CombatMessage(text=f"Combat begins! Turn order: {names}."))
        self._begin_turn(self.sequencer.enter_combat())

    def abort(self) -> None:
        """
        Tears the encounter down, e.g. when the player flees.

        Pending continuations are cancelled and the player and companion are
        committed to the store as they are.
        """
        if self.is_over:
            return
        self._teardown()
        self._emit(CombatMessage(text="The encounter was aborted."))
        self._commit()

    def _teardown(self) -> None:
        self.state.epoch += 1
        self.scheduler.cancel_all()
        self._torn_down = True

    def _require_running(self) -> None:
        if self.is_over:
            raise InvalidActionError(
                "The encounter is over",
                {"phase": self.state.phase, "epoch": self.state.epoch},
            )

    # ============================================================================
    # TURN FLOW
    # ============================================================================

    def _defer(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedules a continuation bound to the current epoch."""
        epoch = self.state.epoch

        def run() -> None:
            if self.state.epoch != epoch or self.is_over:
                log_debug(f"Dropped a stale continuation of epoch {epoch}")
                return
            callback()

        self.scheduler.call_later(delay, run)

    def _advance(self) -> None:
        self._begin_turn(self.sequencer.advance_turn())

    def _begin_turn(self, combatant: Combatant | None) -> None:
        if combatant is None:
            # Nobody left standing: the sequencer already forced the outcome.
            if not self._check_outcome():
                log_critical(
                    "No combatant can act but the encounter is not over",
                    {"phase": self.state.phase},
                )
            return
        self._expire_effects(combatant)
        self._acted = False
        self._movement_used = 0
        if self._check_outcome():
            return
        self._turn_handlers[combatant.kind](combatant)

    def _start_player_turn(self, player: Combatant) -> None:
        log_debug(f"Waiting for the action of {player.name}")

    def _start_companion_turn(self, companion: Combatant) -> None:
        self._defer(
            self.settings.companion_action_delay,
            lambda: self._companion_act(companion),
        )

    def _start_enemy_turn(self, enemy: Combatant) -> None:
        self._defer(self.settings.enemy_action_delay, lambda: self._enemy_act(enemy))

    # ============================================================================
    # PLAYER
    # ============================================================================

    def submit_player_action(self, action: PlayerAction | None) -> ActionResult:
        """
        Resolves the action selected by the player.

        Invalid actions are rejected with an error message and do not consume
        the turn.

        Args:
            action (PlayerAction | None): The selected action.

        Returns:
            ActionResult: The applied or rejected result.

        Raises:
            InvalidActionError: If the encounter is over.

        """
        self._require_running()
        state = self.state
        if state.phase != CombatPhase.PLAYER_TURN or self._acted:
            return self._reject(
                ActionResult.failure("It is not your turn.", ErrorKind.OUT_OF_TURN)
            )

        targets: list[Combatant] = []
        for target_id in action.target_ids if action else []:
            target = state.get_combatant(target_id)
            if target is None:
                return self._reject(
                    ActionResult.failure(
                        f"Unknown target: {target_id}.", ErrorKind.NO_TARGET_SELECTED
                    )
                )
            targets.append(target)

        result = execute_player_action(
            state.player,
            action,
            targets,
            state.spellbook,
            self.dice,
            self._ac_bonuses(targets),
        )
        if self._is_rejection(result):
            return self._reject(result)

        self._acted = True
        self._apply(result)
        if not self._check_outcome():
            self._defer(self.settings.player_advance_delay, self._advance)
        return result

    def move_combatant(self, combatant_id: str, destination: Position) -> bool:
        """
        Moves the combatant whose turn it is, if the validator allows it.

        Args:
            combatant_id (str): The id of the combatant to move.
            destination (Position): The destination square.

        Returns:
            bool: True if the combatant moved.

        Raises:
            InvalidActionError: If the encounter is over.

        """
        self._require_running()
        state = self.state
        combatant = state.current_combatant
        if combatant is None or combatant.id != combatant_id or self._acted:
            self._reject(
                ActionResult.failure("Only the active combatant can move.", ErrorKind.OUT_OF_TURN)
            )
            return False
        origin = state.position_of(combatant_id)
        if origin is None:
            log_warning(
                f"{combatant.name} has no position on the grid",
                {"combatant": combatant_id},
            )
            return False
        steps = chebyshev_distance(origin.x, origin.y, destination.x, destination.y)
        remaining = self.settings.movement_budget - self._movement_used
        if steps > remaining or not self.validator.is_valid_move(
            combatant, origin, destination, state
        ):
            self._reject(
                ActionResult.failure(
                    f"{combatant.name} cannot move to ({destination.x}, {destination.y}).",
                    ErrorKind.ILLEGAL_MOVE,
                )
            )
            return False
        self._movement_used += steps
        self._relocate(combatant, destination)
        return True

    # ============================================================================
    # COMPANION
    # ============================================================================

    def _companion_act(self, companion: Combatant) -> None:
        if self._check_outcome():
            return
        acted = False
        try:
            result, acted = self._companion_turn(companion)
        except Exception as e:
            log_error(
                f"Decision of {companion.name} failed: {e}",
                {"companion": companion.id},
                e,
            )
            result = ActionResult(success=False, error=ErrorKind.DECISION_FAILED)
            result.say(f"{companion.name} takes no action.")

        self._apply(result)
        if self._check_outcome():
            return
        if acted:
            self._defer(self.settings.companion_advance_delay, self._advance)
        else:
            self._defer(self.settings.idle_advance_delay, self._advance)

    def _companion_turn(self, companion: Combatant) -> tuple[ActionResult, bool]:
        """
        Decides, moves and resolves the companion action.

        Returns:
            tuple[ActionResult, bool]:
                The result, and whether an action was actually resolved.

        Raises:
            ValueError: If the decision is missing what its type needs.

        """
        decision = self.decide(companion, self.state, self.settings)
        if decision is None or decision.type == ActionType.NONE:
            result = ActionResult(success=False)
            result.say(f"{companion.name} takes no action.")
            return result, False
        handler = self._decision_handlers.get(decision.type)
        if handler is None or decision.target is None:
            raise ValueError(f"Incomplete {decision.type} decision without a target")

        destination = calculate_optimal_movement(
            companion,
            decision,
            self.state,
            self.validator,
            self.settings.movement_budget,
        )
        if destination is not None:
            self._relocate(companion, destination)

        reach = decision.effective_range
        distance = distance_between(self.state, companion.id, decision.target.id)
        if reach is not None and distance > reach:
            result = ActionResult.failure(
                f"{companion.name} cannot reach {decision.target.name}.",
                ErrorKind.OUT_OF_RANGE,
                MessageCategory.INFO,
            )
            return result, False
        return handler(companion, decision), True

    def _resolve_attack_decision(
        self, companion: Combatant, decision: CompanionDecision
    ) -> ActionResult:
        if decision.attack is None:
            raise ValueError("Attack decision without an attack")
        return resolve_entity_attack(
            companion,
            decision.attack,
            decision.target,
            self.dice,
            self._ac_bonus(decision.target.id),
        )

    def _resolve_spell_decision(
        self, companion: Combatant, decision: CompanionDecision
    ) -> ActionResult:
        if decision.spell is None:
            raise ValueError("Spell decision without a spell")
        return cast_spell(
            companion,
            decision.spell,
            decision.targets,
            self.dice,
            self._ac_bonuses(decision.targets),
        )

    def _resolve_heal_decision(
        self, companion: Combatant, decision: CompanionDecision
    ) -> ActionResult:
        if decision.spell is not None:
            return self._resolve_spell_decision(companion, decision)
        return self._resolve_support_decision(companion, decision)

    def _resolve_support_decision(
        self, companion: Combatant, decision: CompanionDecision
    ) -> ActionResult:
        if decision.ability is None:
            raise ValueError("Support decision without an ability")
        return resolve_support(companion, decision.ability, decision.targets, self.dice)

    # ============================================================================
    # ENEMIES
    # ============================================================================

    def _enemy_target(self, enemy: Combatant) -> Combatant | None:
        """Picks the taunting combatant, else the player, else the companion."""
        taunter = self.state.taunted_by(enemy.id)
        if taunter is not None:
            return taunter
        for candidate in (self.state.player, self.state.companion):
            if candidate is not None and candidate.is_alive():
                return candidate
        opponents = self.state.living_opponents_of(enemy)
        return opponents[0] if opponents else None

    def _enemy_act(self, enemy: Combatant) -> None:
        if self._check_outcome():
            return
        if not enemy.attacks:
            self._apply(
                ActionResult.failure(
                    f"{enemy.name} has no attack available.",
                    ErrorKind.NO_ATTACK_AVAILABLE,
                    MessageCategory.INFO,
                )
            )
            self._defer(self.settings.idle_advance_delay, self._advance)
            return

        target = self._enemy_target(enemy)
        if target is None:
            self._defer(self.settings.idle_advance_delay, self._advance)
            return
        attack = self.dice.choice(enemy.attacks)
        self._apply(
            resolve_entity_attack(
                enemy, attack, target, self.dice, self._ac_bonus(target.id)
            )
        )
        if not self._check_outcome():
            self._defer(self.settings.enemy_advance_delay, self._advance)

    # ============================================================================
    # RESULTS
    # ============================================================================

    def _emit(self, message: CombatMessage) -> None:
        self.state.log.append(message)
        self.sink.append(message)

    @staticmethod
    def _is_rejection(result: ActionResult) -> bool:
        return (
            not result.success
            and result.error is not None
            and result.error.severity == ErrorSeverity.INVALID_ACTION
        )

    def _reject(self, result: ActionResult) -> ActionResult:
        """Reports a rejected action without touching the state."""
        for message in result.messages:
            self._emit(message)
        self.history.append(result)
        return result

    def _apply(self, result: ActionResult) -> None:
        """Applies the damage, healing, effects and resources of a result."""
        state = self.state
        for message in result.messages:
            self._emit(message)
        for entry in result.damage:
            target = state.get_combatant(entry.target_id)
            if target is None:
                log_warning(f"Damage for unknown combatant {entry.target_id}")
                continue
            if target.take_damage(entry.amount) and target.is_defeated():
                self._emit(CombatMessage(text=f"{target.name} falls!"))
        for entry in result.healing:
            target = state.get_combatant(entry.target_id)
            if target is None:
                log_warning(f"Healing for unknown combatant {entry.target_id}")
                continue
            target.heal(entry.amount)
        state.active_effects.extend(effect.model_copy() for effect in result.effects)
        for use in result.resources:
            caster = state.get_combatant(use.caster_id)
            if caster is None:
                continue
            if use.slot_level is not None and caster.spellcasting is not None:
                caster.spellcasting.consume_slot(use.slot_level)
            if use.ability_name is not None and isinstance(caster, Companion):
                ability = caster.get_support(use.ability_name)
                if ability is not None:
                    ability.spend()
        self.history.append(result)

    def _relocate(self, combatant: Combatant, destination: Position) -> None:
        self.state.positions[combatant.id] = destination
        self._emit(
            CombatMessage(
                text=f"{combatant.name} moves to ({destination.x}, {destination.y}).",
            )
        )

    def _expire_effects(self, combatant: Combatant) -> None:
        """Counts down the effects applied by a combatant whose turn starts."""
        kept = []
        for effect in self.state.active_effects:
            if effect.source_id == combatant.id:
                effect.duration -= 1
                if effect.duration <= 0:
                    log_debug(f"Effect {effect.kind} of {combatant.name} ends")
                    continue
            kept.append(effect)
        self.state.active_effects = kept

    def _ac_bonus(self, target_id: str) -> int:
        if self.state.is_protected(target_id):
            return self.settings.protect_ac_bonus
        return 0

    def _ac_bonuses(self, targets: list[Combatant]) -> dict[str, int]:
        return {target.id: self._ac_bonus(target.id) for target in targets}

    # ============================================================================
    # OUTCOME
    # ============================================================================

    def _check_outcome(self) -> bool:
        """
        Evaluates the outcome and ends the encounter when it is decided.

        Returns:
            bool: True if the encounter is over.

        """
        if self.is_over:
            return True
        if self.state.phase == CombatPhase.VICTORY:
            outcome = CombatOutcome.VICTORY
        elif self.state.phase == CombatPhase.DEFEAT:
            outcome = CombatOutcome.DEFEAT
        else:
            outcome = evaluate_state(self.state)
        if outcome == CombatOutcome.CONTINUING:
            return False
        self._finish(outcome)
        return True

    def _finish(self, outcome: CombatOutcome) -> None:
        self.sequencer.finish(outcome)
        self.outcome = outcome
        self._finished = True
        self.state.epoch += 1
        self.scheduler.cancel_all()
        if outcome == CombatOutcome.VICTORY:
            self._emit(
                CombatMessage(text="Victory! Every enemy has fallen.", category=MessageCategory.VICTORY)
            )
        else:
            self._emit(
                CombatMessage(text="Defeat... the party has fallen.", category=MessageCategory.DEFEAT)
            )
        self._commit()

    def _commit(self) -> None:
        if self.store is None:
            return
        self.store.commit(self.state.player)
        if self.state.companion is not None:
            self.store.commit(self.state.companion)
