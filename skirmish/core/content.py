"""
Template registry for the combat engine.

Holds the enemy templates, the weapons that equipment keys refer to and the
spellbook, loaded from the JSON files bundled in ``skirmish/data`` or from a
directory chosen by the caller. The repository is an ordinary object, created
once by the caller and passed to the encounter initializer.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from skirmish.actions.attacks import Attack
from skirmish.actions.spells import Spell
from skirmish.character.spellcasting import Spellcasting
from skirmish.items.weapon import Weapon

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class EnemyTemplate(BaseModel):
    """The data an enemy is cloned from."""

    name: str = Field(
        description="Display name of the enemy.",
    )
    max_hp: int = Field(
        default=10,
        gt=0,
        description="Maximum hit points.",
    )
    current_hp: int | None = Field(
        default=None,
        description="Starting hit points; defaults to max_hp.",
    )
    armor_class: int = Field(
        default=10,
        description="Armor class.",
    )
    level: int | None = Field(
        default=None,
        ge=1,
        description="Challenge level, used for the proficiency bonus.",
    )
    stats: dict[str, int] = Field(
        default_factory=dict,
        description="Ability scores.",
    )
    attacks: list[Attack] = Field(
        default_factory=list,
        description="Natural or wielded attacks.",
    )
    spellcasting: Spellcasting | None = Field(
        default=None,
        description="Spellcasting block, for caster enemies.",
    )
    image: str = Field(
        default="",
        description="Asset reference for the presentation layer.",
    )


class ContentRepository:
    """
    One-stop registry for the templates an encounter is built from.
    """

    enemies: dict[str, EnemyTemplate]
    weapons: dict[str, Weapon]
    spells: dict[str, Spell]

    def __init__(
        self,
        enemies: dict[str, EnemyTemplate] | None = None,
        weapons: dict[str, Weapon] | None = None,
        spells: dict[str, Spell] | None = None,
    ) -> None:
        self.enemies = dict(enemies or {})
        self.weapons = dict(weapons or {})
        self.spells = dict(spells or {})

    @classmethod
    def from_directory(cls, root: Path | None = None) -> "ContentRepository":
        """
        Loads every registry from a directory of JSON files.

        Args:
            root (Path | None):
                The directory holding enemies.json, weapons.json and
                spells.json. Defaults to the bundled data.

        Returns:
            ContentRepository: The loaded repository.

        """
        repository = cls()
        repository.reload(root or DATA_DIR)
        return repository

    def reload(self, root: Path) -> None:
        """
        (Re)loads all the JSON assets from disk.

        Args:
            root (Path): The directory containing the data files.

        """
        self.enemies = _load_json_file(
            root / "enemies.json", self._load_enemies, "enemy templates"
        )
        self.weapons = _load_json_file(
            root / "weapons.json", self._load_weapons, "weapons"
        )
        self.spells = _load_json_file(root / "spells.json", self._load_spells, "spells")

    def get_enemy_template(self, key: str) -> EnemyTemplate | None:
        """Get an enemy template by type key, or None if not found."""
        return self.enemies.get(key)

    def get_weapon(self, key: str) -> Weapon | None:
        """Get a weapon by key, or None if not found."""
        weapon = self.weapons.get(key)
        if weapon is None:
            log_warning(
                f"Weapon '{key}' not found in ContentRepository.",
                {"key": key},
            )
        return weapon

    def get_spell(self, name: str) -> Spell | None:
        """Get a spell by name, or None if not found."""
        return self.spells.get(name)

    @staticmethod
    def _load_enemies(data: dict[str, dict]) -> dict[str, EnemyTemplate]:
        """
        Load enemy templates from JSON data.

        Args:
            data (dict[str, dict]): Template data by type key.

        Returns:
            dict[str, EnemyTemplate]: Templates by type key.

        """
        return {key: EnemyTemplate(**entry) for key, entry in data.items()}

    @staticmethod
    def _load_weapons(data: dict[str, dict]) -> dict[str, Weapon]:
        """
        Load weapons from JSON data.

        Args:
            data (dict[str, dict]): Weapon data by equipment key.

        Returns:
            dict[str, Weapon]: Weapons by equipment key.

        """
        return {key: Weapon(**entry) for key, entry in data.items()}

    @staticmethod
    def _load_spells(data: dict[str, dict]) -> dict[str, Spell]:
        """
        Load spells from JSON data.

        Args:
            data (dict[str, dict]): Spell data by name.

        Returns:
            dict[str, Spell]: Spells by name.

        Raises:
            ValueError: If an entry name does not match its key.

        """
        spells: dict[str, Spell] = {}
        for key, entry in data.items():
            spell = Spell(**entry)
            if spell.name != key:
                raise ValueError(f"Spell key '{key}' does not match name '{spell.name}'")
            spells[key] = spell
        return spells


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[dict[str, dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        log_debug(f"Loading {description} using {loader_func.__name__}...")
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected object in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
