"""
Constants and enumerations for the combat engine.

Defines the combatant types, combat phases, message categories, action types
and the other enumerations shared by every part of the engine.
"""

from enum import Enum

# Ability score names, as used in the stats mapping of a combatant.
ABILITY_SCORES: tuple[str, ...] = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

# Default battlefield size.
GRID_COLUMNS = 8
GRID_ROWS = 6

# Fixed ids of the player-side combatants.
PLAYER_ID = "player"
COMPANION_ID = "companion"


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class CombatantType(NiceEnum):
    """Defines the variant of a combatant."""

    PLAYER = "player"
    COMPANION = "companion"
    ENEMY = "enemy"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this combatant type."""
        return {
            CombatantType.PLAYER: "👤",
            CombatantType.COMPANION: "🤝",
            CombatantType.ENEMY: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this combatant type."""
        return {
            CombatantType.PLAYER: "bold blue",
            CombatantType.COMPANION: "bold green",
            CombatantType.ENEMY: "bold red",
        }.get(self, "dim white")

    @property
    def initiative_priority(self) -> int:
        """Returns the tie-break rank used when initiatives are equal."""
        return {
            CombatantType.PLAYER: 0,
            CombatantType.COMPANION: 1,
            CombatantType.ENEMY: 2,
        }[self]

    def colorize(self, message: str) -> str:
        """Applies combatant type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


def is_opponent(first: CombatantType, second: CombatantType) -> bool:
    """
    Checks whether two combatant types fight on opposite sides.

    Args:
        first (CombatantType): The first combatant type.
        second (CombatantType): The second combatant type.

    Returns:
        bool: True if exactly one of the two is an enemy.

    """
    return (first == CombatantType.ENEMY) != (second == CombatantType.ENEMY)


class CombatPhase(NiceEnum):
    """Defines the phases of the turn sequencer state machine."""

    SETUP = "setup"
    COMBAT = "combat"
    PLAYER_TURN = "player-turn"
    COMPANION_TURN = "companion-turn"
    ENEMY_TURN = "enemy-turn"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def is_terminal(self) -> bool:
        """Returns True for the phases that end the encounter."""
        return self in (CombatPhase.VICTORY, CombatPhase.DEFEAT)

    @property
    def is_turn(self) -> bool:
        """Returns True for the phases where a combatant is acting."""
        return self in (
            CombatPhase.PLAYER_TURN,
            CombatPhase.COMPANION_TURN,
            CombatPhase.ENEMY_TURN,
        )


class MessageCategory(NiceEnum):
    """Defines the categories accepted by the narrative log."""

    TURN_START = "turn-start"
    HIT = "hit"
    MISS = "miss"
    CRITICAL = "critical"
    SPELL = "spell"
    SPELL_HIT = "spell-hit"
    HEALING = "healing"
    SUPPORT = "support"
    ERROR = "error"
    INFO = "info"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this message category."""
        return {
            MessageCategory.TURN_START: "⏱",
            MessageCategory.HIT: "⚔️",
            MessageCategory.MISS: "❌",
            MessageCategory.CRITICAL: "💥",
            MessageCategory.SPELL: "🔮",
            MessageCategory.SPELL_HIT: "✨",
            MessageCategory.HEALING: "💚",
            MessageCategory.SUPPORT: "🛡️",
            MessageCategory.ERROR: "⚠️",
            MessageCategory.INFO: "ℹ️",
            MessageCategory.VICTORY: "🎉",
            MessageCategory.DEFEAT: "💀",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this message category."""
        return {
            MessageCategory.TURN_START: "bold cyan",
            MessageCategory.HIT: "bold yellow",
            MessageCategory.MISS: "dim white",
            MessageCategory.CRITICAL: "bold red",
            MessageCategory.SPELL: "bold magenta",
            MessageCategory.SPELL_HIT: "magenta",
            MessageCategory.HEALING: "bold green",
            MessageCategory.SUPPORT: "bold blue",
            MessageCategory.ERROR: "red",
            MessageCategory.INFO: "white",
            MessageCategory.VICTORY: "bold green",
            MessageCategory.DEFEAT: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies category color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class RangeCategory(NiceEnum):
    """Defines whether an attack is made in melee or at range."""

    MELEE = "melee"
    RANGED = "ranged"


class DamageType(NiceEnum):
    """Defines the types of damage an attack or spell can inflict."""

    PIERCING = "piercing"
    SLASHING = "slashing"
    BLUDGEONING = "bludgeoning"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    POISON = "poison"
    NECROTIC = "necrotic"
    RADIANT = "radiant"
    FORCE = "force"


class SpellCategory(NiceEnum):
    """Defines the primary purpose of a spell."""

    OFFENSIVE = "offensive"
    HEALING = "healing"


class ActionType(NiceEnum):
    """Defines the kind of action a combatant takes on its turn."""

    ATTACK = "attack"
    SPELL = "spell"
    HEAL_SUPPORT = "heal_support"
    PROTECT = "protect"
    TAUNT = "taunt"
    NONE = "none"


class SupportKind(NiceEnum):
    """Defines the kind of a companion support ability."""

    HEAL = "heal"
    PROTECT = "protect"
    TAUNT = "taunt"


class EffectKind(NiceEnum):
    """Defines the kind of an effect applied by a support action."""

    PROTECTED = "protected"
    TAUNTED = "taunted"


class CombatOutcome(NiceEnum):
    """Defines the result of evaluating the end-of-combat conditions."""

    CONTINUING = "continuing"
    VICTORY = "victory"
    DEFEAT = "defeat"
