"""
Player action entry point.

The presentation layer builds a PlayerAction from the player's selection and
the combat manager hands it here together with the resolved targets.
"""

from collections.abc import Callable

from catchery import log_warning
from pydantic import BaseModel, Field

from skirmish.character.combatant import Combatant
from skirmish.core.constants import ActionType
from skirmish.core.dice_parser import DiceRoller
from skirmish.core.error_handling import ErrorKind

from .attack_action import execute_attack
from .results import ActionResult
from .spell_action import cast_spell
from .spells import Spell


class PlayerAction(BaseModel):
    """An action selected by the player."""

    type: ActionType = Field(
        description="The kind of action.",
    )
    name: str | None = Field(
        default=None,
        description="Name of the attack or spell; the first attack if omitted.",
    )
    target_ids: list[str] = Field(
        default_factory=list,
        description="Ids of the selected targets.",
    )


def _attack(
    player: Combatant,
    action: PlayerAction,
    targets: list[Combatant],
    spellbook: dict[str, Spell],
    dice: DiceRoller | None,
    ac_bonuses: dict[str, int],
) -> ActionResult:
    if action.name is None:
        attack = player.attacks[0] if player.attacks else None
    else:
        attack = player.get_attack(action.name)
    if attack is None:
        return ActionResult.failure(
            f"{player.name} has no attack named {action.name}.",
            ErrorKind.UNKNOWN_ACTION,
        )
    fallen = [target for target in targets if target.is_defeated()]
    if fallen:
        return ActionResult.failure(
            f"{fallen[0].name} has already fallen.",
            ErrorKind.TARGET_DEFEATED,
        )
    return execute_attack(player, attack, targets, dice, ac_bonuses)


def _spell(
    player: Combatant,
    action: PlayerAction,
    targets: list[Combatant],
    spellbook: dict[str, Spell],
    dice: DiceRoller | None,
    ac_bonuses: dict[str, int],
) -> ActionResult:
    spell = spellbook.get(action.name or "")
    if spell is None:
        return ActionResult.failure(
            f"Unknown spell: {action.name}.",
            ErrorKind.UNKNOWN_ACTION,
        )
    return cast_spell(player, spell, targets, dice, ac_bonuses)


_HANDLERS: dict[ActionType, Callable[..., ActionResult]] = {
    ActionType.ATTACK: _attack,
    ActionType.SPELL: _spell,
}


def execute_player_action(
    player: Combatant,
    action: PlayerAction | None,
    targets: list[Combatant],
    spellbook: dict[str, Spell] | None = None,
    dice: DiceRoller | None = None,
    ac_bonuses: dict[str, int] | None = None,
) -> ActionResult:
    """
    Resolves the action the player selected.

    Rejected actions come back with ``success=False`` and an invalid-action
    error kind; the caller must not consume the player's turn for them.

    Args:
        player (Combatant): The player.
        action (PlayerAction | None): The selected action.
        targets (list[Combatant]): The selected targets.
        spellbook (dict[str, Spell] | None): Spells by name.
        dice (DiceRoller | None): The die source.
        ac_bonuses (dict[str, int] | None): Armor class bonuses by target id.

    Returns:
        ActionResult: The outcome of the action.

    """
    if action is None:
        return ActionResult.failure("No action selected.", ErrorKind.NO_ACTION_SELECTED)
    if not targets:
        return ActionResult.failure("No target selected.", ErrorKind.NO_TARGET_SELECTED)

    handler = _HANDLERS.get(action.type)
    if handler is None:
        log_warning(
            f"Unsupported player action type: {action.type}",
            {"player": player.id, "action": action.type},
        )
        return ActionResult.failure(
            f"Unknown action type: {action.type}.",
            ErrorKind.UNKNOWN_ACTION,
        )
    return handler(player, action, targets, spellbook or {}, dice, ac_bonuses or {})
