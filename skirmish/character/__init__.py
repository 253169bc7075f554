"""
Character module for the combat engine.

This module defines the combatant records (player, companion, enemy), their
spellcasting block and the interface to the persistent character store.
"""

from .combatant import Combatant, Companion, Enemy, Player, Position
from .spellcasting import Spellcasting
from .store import CharacterStore, InMemoryCharacterStore

__all__ = [
    "Combatant",
    "Companion",
    "Enemy",
    "Player",
    "Position",
    "Spellcasting",
    "CharacterStore",
    "InMemoryCharacterStore",
]
