"""
Attack and spell attack bonus calculation.
"""

from catchery import log_error, log_warning

from skirmish.character.combatant import Combatant
from skirmish.core.error_handling import ErrorKind, Resolved

from .attacks import Attack


def is_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def attack_bonus(attacker: Combatant, attack: Attack) -> Resolved[int]:
    """
    Computes the bonus added to the d20 of an attack.

    An explicit ``attack.attack_bonus`` is returned verbatim. Otherwise the
    bonus is the attacker's proficiency bonus plus the modifier of the
    governing ability: ``attack.stat`` if set, dexterity for ranged attacks
    and reach weapons, strength otherwise.

    Args:
        attacker (Combatant): The attacking combatant.
        attack (Attack): The attack being made.

    Returns:
        Resolved[int]:
            The bonus. On a missing ability score the bonus falls back to
            the proficiency bonus alone and carries MISSING_STAT.

    """
    if attack.attack_bonus is not None:
        if not is_number(attack.attack_bonus):
            log_error(
                f"Attack {attack.name} has a non-numeric attack bonus",
                {"attacker": attacker.id, "attack_bonus": attack.attack_bonus},
            )
            return Resolved[int](value=0, error=ErrorKind.NON_NUMERIC_BONUS)
        return Resolved[int](value=attack.attack_bonus)

    proficiency = attacker.proficiency_bonus
    stat = attack.stat or ("dexterity" if attack.is_ranged else "strength")
    modifier = attacker.modifier(stat)
    if modifier is None:
        log_warning(
            f"{attacker.name} has no {stat} score, using proficiency only",
            {"attacker": attacker.id, "attack": attack.name, "stat": stat},
        )
        return Resolved[int](value=proficiency, error=ErrorKind.MISSING_STAT)
    return Resolved[int](value=proficiency + modifier)


def spell_attack_bonus(caster: Combatant) -> Resolved[int]:
    """
    Computes the bonus added to the d20 of a spell attack.

    Args:
        caster (Combatant): The casting combatant.

    Returns:
        Resolved[int]:
            Proficiency plus the spellcasting modifier, or the proficiency
            bonus alone when the caster has no spellcasting block or lacks
            the governing score.

    """
    proficiency = caster.proficiency_bonus
    if caster.spellcasting is None:
        return Resolved[int](value=proficiency)
    ability = caster.spellcasting.ability
    modifier = caster.modifier(ability)
    if modifier is None:
        log_warning(
            f"{caster.name} has no {ability} score, using proficiency only",
            {"caster": caster.id, "ability": ability},
        )
        return Resolved[int](value=proficiency, error=ErrorKind.MISSING_STAT)
    return Resolved[int](value=proficiency + modifier)


def spellcasting_modifier(caster: Combatant) -> int:
    """Returns the modifier of the caster's spellcasting ability, 0 if none."""
    if caster.spellcasting is None:
        return 0
    return caster.modifier(caster.spellcasting.ability) or 0
