"""
Error taxonomy for the combat engine.

Fatal configuration problems are raised as exceptions. Recoverable data
errors and rejected actions are returned to the caller as values, carrying an
ErrorKind, so that tests can assert on the error path instead of reading the
logs.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from .constants import NiceEnum

T = TypeVar("T")


class ErrorSeverity(NiceEnum):
    """How an error affects the running encounter."""

    RECOVERABLE = "recoverable"
    INVALID_ACTION = "invalid_action"
    DECISION = "decision"


class ErrorKind(NiceEnum):
    """Enumeration of the non-fatal error kinds produced during combat."""

    # Recoverable data errors.
    MISSING_STAT = "missing_stat"
    MISSING_TEMPLATE = "missing_template"
    INVALID_DICE = "invalid_dice"
    NON_NUMERIC_BONUS = "non_numeric_bonus"
    NO_ATTACK_AVAILABLE = "no_attack_available"
    # Invalid actions.
    NO_ACTION_SELECTED = "no_action_selected"
    NO_TARGET_SELECTED = "no_target_selected"
    TARGET_DEFEATED = "target_defeated"
    UNKNOWN_ACTION = "unknown_action"
    SPELL_NOT_PREPARED = "spell_not_prepared"
    NO_SPELL_SLOT = "no_spell_slot"
    ABILITY_EXHAUSTED = "ability_exhausted"
    ILLEGAL_MOVE = "illegal_move"
    OUT_OF_RANGE = "out_of_range"
    OUT_OF_TURN = "out_of_turn"
    # Companion decision failures.
    DECISION_FAILED = "decision_failed"

    @property
    def severity(self) -> ErrorSeverity:
        """Returns the severity class of this error kind."""
        if self in _RECOVERABLE_KINDS:
            return ErrorSeverity.RECOVERABLE
        if self == ErrorKind.DECISION_FAILED:
            return ErrorSeverity.DECISION
        return ErrorSeverity.INVALID_ACTION


_RECOVERABLE_KINDS = {
    ErrorKind.MISSING_STAT,
    ErrorKind.MISSING_TEMPLATE,
    ErrorKind.INVALID_DICE,
    ErrorKind.NON_NUMERIC_BONUS,
    ErrorKind.NO_ATTACK_AVAILABLE,
}


class CombatError(Exception):
    """Base class for the exceptions raised by the combat engine."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


class ConfigurationError(CombatError):
    """Raised when an encounter cannot be initialized at all."""


class InvalidActionError(CombatError):
    """Raised when the engine API is used outside of a running encounter."""


class Resolved(BaseModel, Generic[T]):
    """
    A computed value together with the recoverable error, if any, that
    forced a fallback while computing it.
    """

    value: T = Field(
        description="The computed value, or the fallback value on error.",
    )
    error: ErrorKind | None = Field(
        default=None,
        description="The recoverable error that forced a fallback.",
    )

    @property
    def ok(self) -> bool:
        """Returns True when the value was computed without a fallback."""
        return self.error is None
