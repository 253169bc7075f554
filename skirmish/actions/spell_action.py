"""
Spell resolution: offensive spells with or without an attack roll, and
healing from spells and support abilities.
"""

from catchery import log_debug

from skirmish.character.combatant import Combatant
from skirmish.core.constants import MessageCategory, SpellCategory
from skirmish.core.dice_parser import DiceRoller, roll_d20, roll_damage
from skirmish.core.error_handling import ErrorKind

from .abilities import SupportAbility
from .bonuses import spell_attack_bonus, spellcasting_modifier
from .results import (
    ActionResult,
    AttackOutcome,
    CombatMessage,
    HealingEntry,
    ResourceUse,
)
from .spells import Spell


def resolve_spell_attack(
    caster: Combatant,
    spell: Spell,
    target: Combatant,
    dice: DiceRoller | None = None,
    ac_bonus: int = 0,
) -> AttackOutcome:
    """
    Resolves an offensive spell against one target.

    Spells that require an attack roll follow the weapon rules, using the
    spell attack bonus; a critical doubles the total damage. Spells without
    an attack roll always hit for the rolled damage plus the flat bonus.

    Args:
        caster (Combatant): The caster.
        spell (Spell): The offensive spell.
        target (Combatant): The target.
        dice (DiceRoller | None): The die source.
        ac_bonus (int): Temporary armor class bonus of the target.

    Returns:
        AttackOutcome: The hit and the damage to deal.

    Raises:
        ValueError: If the spell deals no damage.

    """
    if spell.damage is None:
        raise ValueError(f"Spell {spell.name} deals no damage")

    if not spell.requires_attack_roll:
        damage = roll_damage(spell.damage.dice, dice) + spell.damage.bonus
        return AttackOutcome(
            target_id=target.id,
            hit=True,
            damage=max(0, damage),
            message=CombatMessage(
                text=f"{spell.name} strikes {target.name} for {damage} damage.",
                category=MessageCategory.SPELL_HIT,
            ),
        )

    bonus = spell_attack_bonus(caster).value
    armor_class = target.armor_class + ac_bonus
    roll = roll_d20(dice)
    total = roll + bonus
    critical = roll == 20
    hit = critical or total >= armor_class
    details = f"rolled {roll}+{bonus}={total} vs AC {armor_class}"
    log_debug(f"{caster.name} casts {spell.name} at {target.name}: {details}")

    if not hit:
        return AttackOutcome(
            target_id=target.id,
            hit=False,
            attack_roll=roll,
            attack_total=total,
            message=CombatMessage(
                text=f"{spell.name} misses {target.name} ({details}).",
                category=MessageCategory.MISS,
            ),
        )

    damage = max(0, roll_damage(spell.damage.dice, dice) + spell.damage.bonus)
    if critical:
        damage *= 2
        text = f"Critical! {spell.name} blasts {target.name} for {damage} damage!"
        category = MessageCategory.CRITICAL
    else:
        text = f"{spell.name} hits {target.name} for {damage} damage ({details})."
        category = MessageCategory.SPELL_HIT
    return AttackOutcome(
        target_id=target.id,
        hit=True,
        critical=critical,
        attack_roll=roll,
        attack_total=total,
        damage=damage,
        message=CombatMessage(text=text, category=category),
    )


def resolve_healing(
    healer: Combatant,
    source: Spell | SupportAbility,
    target: Combatant,
    dice: DiceRoller | None = None,
) -> HealingEntry:
    """
    Rolls the healing of a spell or support ability on one target.

    Args:
        healer (Combatant): The combatant providing the healing.
        source (Spell | SupportAbility): What heals.
        target (Combatant): The healed combatant.
        dice (DiceRoller | None): The die source.

    Returns:
        HealingEntry: At least 1 hit point of healing.

    """
    if isinstance(source, Spell):
        if source.healing is None:
            raise ValueError(f"Spell {source.name} does not heal")
        amount = roll_damage(source.healing.dice, dice) + source.healing.bonus
        if source.healing.add_ability_modifier:
            amount += spellcasting_modifier(healer)
    else:
        amount = roll_damage(source.dice, dice)
    return HealingEntry(target_id=target.id, amount=max(1, amount))


def cast_spell(
    caster: Combatant,
    spell: Spell,
    targets: list[Combatant],
    dice: DiceRoller | None = None,
    ac_bonuses: dict[str, int] | None = None,
) -> ActionResult:
    """
    Casts a spell on the given targets.

    The slot is not spent here: the result carries a ResourceUse for the
    lowest slot able to hold the spell, applied by the combat manager.

    Args:
        caster (Combatant): The caster.
        spell (Spell): The spell.
        targets (list[Combatant]): The targets.
        dice (DiceRoller | None): The die source.
        ac_bonuses (dict[str, int] | None): Armor class bonuses by target id.

    Returns:
        ActionResult: The damage or healing, and the slot to spend.

    """
    # =====================================================================
    # 1. VALIDATION
    # =====================================================================

    book = caster.spellcasting
    if book is None or not book.is_ready(spell):
        return ActionResult.failure(
            f"{caster.name} has not prepared {spell.name}.",
            ErrorKind.SPELL_NOT_PREPARED,
        )
    slot_level = None
    if not spell.is_cantrip:
        slot_level = book.lowest_available_slot(spell.level)
        if slot_level is None:
            return ActionResult.failure(
                f"{caster.name} has no spell slot left for {spell.name}.",
                ErrorKind.NO_SPELL_SLOT,
            )
    if spell.category == SpellCategory.OFFENSIVE:
        targets = [target for target in targets if not target.is_defeated()]
        if not targets:
            return ActionResult.failure(
                "Every target of the spell has already fallen.",
                ErrorKind.TARGET_DEFEATED,
                MessageCategory.INFO,
            )

    # =====================================================================
    # 2. RESOLUTION
    # =====================================================================

    ac_bonuses = ac_bonuses or {}
    result = ActionResult()
    result.say(f"{caster.name} casts {spell.name}!", MessageCategory.SPELL)
    for target in targets:
        if spell.category == SpellCategory.HEALING:
            entry = resolve_healing(caster, spell, target, dice)
            result.healing.append(entry)
            result.say(
                f"{spell.name} heals {target.name} for {entry.amount} HP.",
                MessageCategory.HEALING,
            )
        else:
            result.add_outcome(
                resolve_spell_attack(
                    caster, spell, target, dice, ac_bonuses.get(target.id, 0)
                )
            )
    if slot_level is not None:
        result.resources.append(ResourceUse(caster_id=caster.id, slot_level=slot_level))
    return result
