"""
Encounter initialization: enemies from templates, initiative and placement.
"""

import math

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from skirmish.character.combatant import Combatant, Companion, Enemy, Player, Position
from skirmish.core.constants import GRID_COLUMNS, GRID_ROWS
from skirmish.core.content import ContentRepository
from skirmish.core.dice_parser import DiceRoller, roll_d20
from skirmish.core.error_handling import ConfigurationError

from .state import CombatState, TurnEntry, TurnOrder

# Default squares of the player side.
PLAYER_START = Position(x=1, y=2)
COMPANION_START = Position(x=0, y=2)
# Enemies take the right two-fifths of the grid.
ENEMY_ZONE_START = 0.6


class EnemyGroup(BaseModel):
    """A number of enemies of the same type."""

    type: str = Field(
        description="Key of the enemy template.",
    )
    count: int = Field(
        default=1,
        ge=1,
        description="How many enemies of this type to create.",
    )


class EncounterSpec(BaseModel):
    """The description of an encounter, as provided by the caller."""

    groups: list[EnemyGroup] = Field(
        default_factory=list,
        description="The enemy groups of the encounter.",
    )
    custom_positions: list[Position | None] = Field(
        default_factory=list,
        description="Positions of the enemies, by index; None for the default.",
    )


# =============================================================================
# Enemies
# =============================================================================


def create_enemies(spec: EncounterSpec, repository: ContentRepository) -> list[Enemy]:
    """
    Creates the enemies of an encounter from the template registry.

    Args:
        spec (EncounterSpec): The encounter description.
        repository (ContentRepository): The template registry.

    Returns:
        list[Enemy]: The enemies, in group order.

    Raises:
        ConfigurationError: If the encounter has no enemy groups.

    """
    if not spec.groups:
        raise ConfigurationError("The encounter has no enemy groups")

    enemies: list[Enemy] = []
    for group_index, group in enumerate(spec.groups):
        template = repository.get_enemy_template(group.type)
        if template is None:
            log_warning(
                f"Enemy template '{group.type}' not found, skipping the group",
                {"group_index": group_index, "type": group.type},
            )
            continue
        for index in range(group.count):
            name = f"{template.name} {index + 1}" if group.count > 1 else template.name
            enemies.append(
                Enemy(
                    id=f"{group.type}_{group_index}_{index}",
                    name=name,
                    template_key=group.type,
                    max_hp=template.max_hp,
                    current_hp=(
                        template.current_hp
                        if template.current_hp is not None
                        else template.max_hp
                    ),
                    armor_class=template.armor_class,
                    level=template.level,
                    stats=dict(template.stats),
                    attacks=[attack.model_copy() for attack in template.attacks],
                    spellcasting=(
                        template.spellcasting.model_copy(deep=True)
                        if template.spellcasting
                        else None
                    ),
                    image=template.image,
                )
            )
    log_debug(f"Created {len(enemies)} enemies")
    return enemies


# =============================================================================
# Initiative
# =============================================================================


def roll_initiative(
    player: Player | None,
    companion: Companion | None,
    enemies: list[Enemy],
    dice: DiceRoller | None = None,
) -> TurnOrder:
    """
    Rolls initiative for every combatant and sorts the turn order.

    Initiative is a d20 plus the dexterity modifier. Ties go to the player,
    then to the companion, then to the enemies in input order. The dice are
    rolled in input order: player, companion, enemies.

    Args:
        player (Player | None): The player.
        companion (Companion | None): The companion, if any.
        enemies (list[Enemy]): The enemies.
        dice (DiceRoller | None): The die source.

    Returns:
        TurnOrder: The entries sorted by descending initiative.

    Raises:
        ConfigurationError: If the player or the player's stats are missing.

    """
    if player is None:
        raise ConfigurationError("Cannot roll initiative without a player")
    if not player.stats:
        raise ConfigurationError(
            "Cannot roll initiative for a player without stats",
            {"player": player.id},
        )

    participants: list[Combatant] = [player]
    if companion is not None:
        participants.append(companion)
    participants.extend(enemies)

    rolled: list[tuple[int, int, int, Combatant]] = []
    for index, combatant in enumerate(participants):
        initiative = roll_d20(dice) + (combatant.modifier("dexterity") or 0)
        rolled.append((initiative, combatant.kind.initiative_priority, index, combatant))
        log_debug(f"{combatant.name} rolls {initiative} for initiative")

    rolled.sort(key=lambda r: (-r[0], r[1], r[2]))
    return [
        TurnEntry(combatant=combatant, initiative=initiative)
        for initiative, _, _, combatant in rolled
    ]


# =============================================================================
# Placement
# =============================================================================


def place_combatants(
    player: Player,
    companion: Companion | None,
    enemies: list[Enemy],
    custom_positions: list[Position | None] | None = None,
    columns: int = GRID_COLUMNS,
    rows: int = GRID_ROWS,
) -> dict[str, Position]:
    """
    Assigns the starting squares.

    The player stands front-left with the companion behind. Enemies fill the
    right two-fifths of the grid row by row; a lone enemy stands in the middle
    of that zone. A custom position replaces the default of the enemy with
    the same index.

    Args:
        player (Player): The player.
        companion (Companion | None): The companion, if any.
        enemies (list[Enemy]): The enemies.
        custom_positions (list[Position | None] | None):
            Positions by enemy index.
        columns (int): Width of the grid.
        rows (int): Height of the grid.

    Returns:
        dict[str, Position]: The position of each combatant, by id.

    """
    positions: dict[str, Position] = {player.id: PLAYER_START.model_copy()}
    if companion is not None:
        positions[companion.id] = COMPANION_START.model_copy()

    custom_positions = custom_positions or []
    start_x = math.floor(columns * ENEMY_ZONE_START)
    width = columns - start_x
    total = len(enemies)
    per_row = max(1, min(width, total))

    for index, enemy in enumerate(enemies):
        custom = custom_positions[index] if index < len(custom_positions) else None
        if custom is not None:
            positions[enemy.id] = custom.model_copy()
        elif total == 1:
            positions[enemy.id] = Position(x=start_x + width // 2, y=rows // 2)
        else:
            y = max(1, min(index // per_row + 1, rows - 2))
            positions[enemy.id] = Position(x=start_x + index % per_row, y=y)
    return positions


# =============================================================================
# Encounter
# =============================================================================


def _equip(combatant: Combatant, repository: ContentRepository) -> None:
    """Appends the attacks of the equipped weapons."""
    for slot, key in combatant.equipment.items():
        weapon = repository.get_weapon(key)
        if weapon is None:
            log_warning(
                f"{combatant.name} has an unknown weapon in slot {slot}",
                {"combatant": combatant.id, "slot": slot, "weapon": key},
            )
            continue
        if combatant.get_attack(weapon.name) is None:
            combatant.attacks.append(weapon.to_attack())


def initialize_combat(
    player: Player | None,
    companion: Companion | None,
    encounter: EncounterSpec,
    repository: ContentRepository,
    dice: DiceRoller | None = None,
    columns: int = GRID_COLUMNS,
    rows: int = GRID_ROWS,
) -> CombatState:
    """
    Builds the state of a new encounter.

    Args:
        player (Player | None): The working copy of the player.
        companion (Companion | None): The working copy of the companion.
        encounter (EncounterSpec): The encounter description.
        repository (ContentRepository): The template registry.
        dice (DiceRoller | None): The die source for initiative.
        columns (int): Width of the grid.
        rows (int): Height of the grid.

    Returns:
        CombatState: The state, in the setup phase.

    Raises:
        ConfigurationError:
            If the player is missing, the encounter is empty or no enemy
            could be created.

    """
    if player is None:
        raise ConfigurationError("Cannot start an encounter without a player")

    enemies = create_enemies(encounter, repository)
    if not enemies:
        raise ConfigurationError(
            "No enemy could be created for the encounter",
            {"groups": [group.type for group in encounter.groups]},
        )

    _equip(player, repository)
    if companion is not None:
        _equip(companion, repository)

    turn_order = roll_initiative(player, companion, enemies, dice)
    positions = place_combatants(
        player, companion, enemies, encounter.custom_positions, columns, rows
    )
    return CombatState(
        player=player,
        companion=companion,
        enemies=enemies,
        turn_order=turn_order,
        positions=positions,
        grid_columns=columns,
        grid_rows=rows,
        spellbook=dict(repository.spells),
    )
