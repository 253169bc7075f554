"""
Weapon and natural attack resolution.

A d20 roll plus the attack bonus must meet the target's armor class; a
natural 20 always hits and doubles the whole damage total.
"""

from catchery import log_debug, log_error

from skirmish.character.combatant import Combatant
from skirmish.core.constants import MessageCategory
from skirmish.core.dice_parser import DiceRoller, roll_d20, roll_damage
from skirmish.core.error_handling import ErrorKind

from .attacks import Attack
from .bonuses import is_number, attack_bonus
from .results import ActionResult, AttackOutcome, CombatMessage


def resolve_attack(
    attacker: Combatant,
    attack: Attack,
    target: Combatant,
    dice: DiceRoller | None = None,
    ac_bonus: int = 0,
) -> AttackOutcome:
    """
    Rolls a single attack against a target.

    Args:
        attacker (Combatant): The attacking combatant.
        attack (Attack): The attack being made.
        target (Combatant): The target of the attack.
        dice (DiceRoller | None): The die source.
        ac_bonus (int): Temporary armor class bonus of the target.

    Returns:
        AttackOutcome: The hit, the rolls and the damage to deal.

    """
    bonus = attack_bonus(attacker, attack).value
    armor_class = target.armor_class + ac_bonus

    roll = roll_d20(dice)
    total = roll + bonus
    critical = roll == 20
    hit = critical or total >= armor_class
    details = f"rolled {roll}+{bonus}={total} vs AC {armor_class}"
    log_debug(f"{attacker.name} attacks {target.name} with {attack.name}: {details}")

    if not hit:
        return AttackOutcome(
            target_id=target.id,
            hit=False,
            attack_roll=roll,
            attack_total=total,
            message=CombatMessage(
                text=f"{attacker.name} misses {target.name} with {attack.name} ({details}).",
                category=MessageCategory.MISS,
            ),
        )

    damage = roll_damage(attack.damage, dice)
    if critical:
        damage *= 2
        message = CombatMessage(
            text=(
                f"Critical hit! {attacker.name} deals {damage} damage to "
                f"{target.name} with {attack.name}!"
            ),
            category=MessageCategory.CRITICAL,
        )
    else:
        message = CombatMessage(
            text=(
                f"{attacker.name} hits {target.name} with {attack.name} "
                f"for {damage} damage ({details})."
            ),
            category=MessageCategory.HIT,
        )
    return AttackOutcome(
        target_id=target.id,
        hit=True,
        critical=critical,
        attack_roll=roll,
        attack_total=total,
        damage=damage,
        message=message,
    )


def resolve_entity_attack(
    attacker: Combatant,
    attack: Attack,
    target: Combatant,
    dice: DiceRoller | None = None,
    ac_bonus: int = 0,
) -> ActionResult:
    """
    Resolves an attack between two combatants, guarding against bad data.

    Args:
        attacker (Combatant): The attacking combatant.
        attack (Attack): The attack being made.
        target (Combatant): The target of the attack.
        dice (DiceRoller | None): The die source.
        ac_bonus (int): Temporary armor class bonus of the target.

    Returns:
        ActionResult:
            The damage to deal and the narrative. A defeated target or a
            non-numeric bonus yields a failed result and no roll is made.

    """
    # =====================================================================
    # 1. VALIDATION
    # =====================================================================

    if target.is_defeated():
        return ActionResult.failure(
            f"{target.name} has already fallen.",
            ErrorKind.TARGET_DEFEATED,
            MessageCategory.INFO,
        )

    bonus = attack_bonus(attacker, attack)
    if bonus.error == ErrorKind.NON_NUMERIC_BONUS or not is_number(
        target.armor_class
    ):
        log_error(
            f"Cannot resolve {attack.name} from {attacker.name} on {target.name}",
            {
                "attack_bonus": attack.attack_bonus,
                "armor_class": target.armor_class,
            },
        )
        return ActionResult.failure(
            f"{attacker.name}'s {attack.name} cannot be resolved.",
            ErrorKind.NON_NUMERIC_BONUS,
        )

    # =====================================================================
    # 2. ROLL
    # =====================================================================

    result = ActionResult(error=bonus.error)
    result.add_outcome(resolve_attack(attacker, attack, target, dice, ac_bonus))
    return result


def execute_attack(
    attacker: Combatant,
    attack: Attack,
    targets: list[Combatant],
    dice: DiceRoller | None = None,
    ac_bonuses: dict[str, int] | None = None,
) -> ActionResult:
    """
    Resolves one attack against each of the given targets, in order.

    Args:
        attacker (Combatant): The attacking combatant.
        attack (Attack): The attack being made.
        targets (list[Combatant]): The targets.
        dice (DiceRoller | None): The die source.
        ac_bonuses (dict[str, int] | None): Armor class bonuses by target id.

    Returns:
        ActionResult: The combined result; successful if any target was attacked.

    """
    ac_bonuses = ac_bonuses or {}
    result = ActionResult(success=False)
    for target in targets:
        single = resolve_entity_attack(
            attacker, attack, target, dice, ac_bonuses.get(target.id, 0)
        )
        result.merge(single)
        result.success = result.success or single.success
    return result
