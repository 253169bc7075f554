"""
Settings module for the combat engine.

Holds the tunable numbers of an encounter: presentation delays, companion
thresholds, grid size and movement budget.
"""

import json
from pathlib import Path
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field, ValidationError

from .constants import GRID_COLUMNS, GRID_ROWS
from .error_handling import ConfigurationError


class CombatSettings(BaseModel):
    """Tunable parameters of the combat engine."""

    companion_action_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds between the companion turn start and its action.",
    )
    companion_advance_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds between the companion action and the next turn.",
    )
    enemy_action_delay: float = Field(
        default=1.5,
        ge=0.0,
        description="Seconds between an enemy turn start and its attack.",
    )
    enemy_advance_delay: float = Field(
        default=2.0,
        ge=0.0,
        description="Seconds between an enemy attack and the next turn.",
    )
    idle_advance_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds before advancing when an actor could not act.",
    )
    player_advance_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds between the player action and the next turn.",
    )
    low_hp_threshold: float = Field(
        default=0.3,
        gt=0.0,
        le=1.0,
        description="HP ratio under which the companion heals an ally.",
    )
    protect_ac_bonus: int = Field(
        default=2,
        ge=0,
        description="Armor class bonus granted by a protect effect.",
    )
    movement_budget: int = Field(
        default=3,
        ge=0,
        description="Squares a combatant may move in a single turn.",
    )
    grid_columns: int = Field(
        default=GRID_COLUMNS,
        ge=1,
        description="Width of the battlefield grid.",
    )
    grid_rows: int = Field(
        default=GRID_ROWS,
        ge=1,
        description="Height of the battlefield grid.",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the die source; None for a random one.",
    )


def load_settings(path: Path | None = None, **overrides: Any) -> CombatSettings:
    """
    Loads the combat settings from a JSON file.

    Args:
        path (Path | None):
            The JSON file to read. When None or missing, the defaults are used.
        **overrides:
            Values that take precedence over the file content.

    Returns:
        CombatSettings: The loaded settings.

    Raises:
        ConfigurationError: If the file content is not valid.

    """
    data: dict[str, Any] = {}
    if path is not None:
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            log_warning(
                f"Settings file not found, using defaults: {path}",
                {"path": str(path)},
            )
    data.update(overrides)
    try:
        return CombatSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid combat settings: {e}",
            {"path": str(path) if path else None},
        ) from e
