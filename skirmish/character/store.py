"""
Character store interface.

The engine never edits the persistent player and companion records while a
fight is running. It works on copies taken when the encounter starts and
commits them back once, when the encounter ends.
"""

from typing import Protocol

from catchery import log_debug, log_warning

from .combatant import Companion, Player


class CharacterStore(Protocol):
    """Persistent holder of the player and companion records."""

    def load_player(self) -> Player | None:
        """Returns a working copy of the player record."""
        ...

    def load_companion(self) -> Companion | None:
        """Returns a working copy of the companion record, if any."""
        ...

    def commit(self, combatant: Player | Companion) -> None:
        """Writes back the HP and resources of a combatant."""
        ...


class InMemoryCharacterStore:
    """
    Character store keeping the records in memory.

    Committing copies hit points, spell slots and support ability uses from
    the working copy; every other field of the stored record is left alone.
    """

    def __init__(
        self,
        player: Player | None = None,
        companion: Companion | None = None,
    ) -> None:
        self.player: Player | None = player
        self.companion: Companion | None = companion
        self.commits: int = 0

    def load_player(self) -> Player | None:
        return self.player.model_copy(deep=True) if self.player else None

    def load_companion(self) -> Companion | None:
        return self.companion.model_copy(deep=True) if self.companion else None

    def commit(self, combatant: Player | Companion) -> None:
        record = self.player if isinstance(combatant, Player) else self.companion
        if record is None or record.id != combatant.id:
            log_warning(
                f"No stored record to commit {combatant.name} into",
                {"combatant": combatant.id},
            )
            return
        record.current_hp = combatant.hp
        if record.spellcasting and combatant.spellcasting:
            record.spellcasting.slots = dict(combatant.spellcasting.slots)
        if isinstance(record, Companion) and isinstance(combatant, Companion):
            for ability in record.support_abilities:
                used = combatant.get_support(ability.name)
                if used is not None:
                    ability.uses = used.uses
        self.commits += 1
        log_debug(f"Committed {combatant.name}: {combatant.hp}/{combatant.max_hp} HP")
