"""
Companion support abilities: heal, protect and taunt.
"""

from skirmish.character.combatant import Combatant
from skirmish.core.constants import EffectKind, MessageCategory, SupportKind
from skirmish.core.dice_parser import DiceRoller
from skirmish.core.error_handling import ErrorKind

from .abilities import SupportAbility
from .results import ActionResult, AppliedEffect, ResourceUse
from .spell_action import resolve_healing


def resolve_support(
    actor: Combatant,
    ability: SupportAbility,
    targets: list[Combatant],
    dice: DiceRoller | None = None,
) -> ActionResult:
    """
    Uses a support ability.

    Healing is rolled immediately. Protect and taunt produce an effect that
    the combat manager keeps until the start of the actor's next turn (or
    for ``ability.duration`` of the actor's turns).

    Args:
        actor (Combatant): The combatant using the ability.
        ability (SupportAbility): The ability.
        targets (list[Combatant]):
            Allies for heal and protect, enemies for taunt.
        dice (DiceRoller | None): The die source.

    Returns:
        ActionResult: The healing or the effect, and the use to spend.

    """
    if not ability.is_available():
        return ActionResult.failure(
            f"{actor.name} cannot use {ability.name} again.",
            ErrorKind.ABILITY_EXHAUSTED,
        )
    if not targets:
        return ActionResult.failure(
            f"{ability.name} has no target.",
            ErrorKind.NO_TARGET_SELECTED,
        )

    result = ActionResult()
    if ability.kind == SupportKind.HEAL:
        for target in targets:
            entry = resolve_healing(actor, ability, target, dice)
            result.healing.append(entry)
            result.say(
                f"{actor.name} uses {ability.name} on {target.name}, "
                f"restoring {entry.amount} HP.",
                MessageCategory.HEALING,
            )
    elif ability.kind == SupportKind.PROTECT:
        names = ", ".join(target.name for target in targets)
        result.effects.append(
            AppliedEffect(
                kind=EffectKind.PROTECTED,
                target_ids=[target.id for target in targets],
                source_id=actor.id,
                duration=ability.duration,
            )
        )
        result.say(f"{actor.name} uses {ability.name} to shield {names}.", MessageCategory.SUPPORT)
    else:
        names = ", ".join(target.name for target in targets)
        result.effects.append(
            AppliedEffect(
                kind=EffectKind.TAUNTED,
                target_ids=[target.id for target in targets],
                source_id=actor.id,
                duration=ability.duration,
            )
        )
        result.say(
            f"{actor.name} uses {ability.name}, drawing the attention of {names}.",
            MessageCategory.SUPPORT,
        )

    if ability.uses > 0:
        result.resources.append(ResourceUse(caster_id=actor.id, ability_name=ability.name))
    return result
