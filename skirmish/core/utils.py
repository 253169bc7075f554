"""
Utilities module for the combat engine.

Provides common helpers shared by the engine: console printing with rich
formatting, the ability modifier and grid distance.
"""

import math
from typing import Any

from rich.console import Console
from rich.rule import Rule

# Shared console for the narrative sink and the demo.
_console = Console(markup=True, width=120, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """Prints rich markup to the shared console."""
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """Prints a horizontal rule; arguments go to ``rich.rule.Rule``."""
    _console.print(Rule(*args, **kwargs))


def ccapture(content: Any) -> str:
    """
    Renders content through the shared console without printing it.

    Args:
        content (Any): Markup text or any rich renderable.

    Returns:
        str: The rendered text, markup resolved.

    """
    with _console.capture() as capture:
        _console.print(content, markup=True, end="")
    return capture.get()


# ---- Stat Modifier ----
def get_stat_modifier(score: int) -> int:
    """Returns floor((score - 10) / 2)."""
    return math.floor((score - 10) / 2)


def get_proficiency_bonus(level: int | None) -> int:
    """
    Calculates the proficiency bonus for a character level.

    Args:
        level (int | None): The character level, if known.

    Returns:
        int: ceil(level / 4) + 1, or 2 when the level is unknown.

    """
    if level is None or level < 1:
        return 2
    return math.ceil(level / 4) + 1


# ---- Grid ----
def chebyshev_distance(ax: int, ay: int, bx: int, by: int) -> int:
    """
    Returns the number of grid moves between two squares when diagonal
    steps cost the same as straight ones.
    """
    return max(abs(ax - bx), abs(ay - by))


def make_bar(current: int, maximum: int, length: int = 10, color: str = "white") -> str:
    """
    Builds a hit point bar in rich markup, e.g. ``[red]▮▮▮[dim white]▯▯[/][/]``.

    Args:
        current (int): Current hit points.
        maximum (int): Maximum hit points.
        length (int): Number of cells.
        color (str): Style of the filled cells.

    Returns:
        str: The markup of the bar.

    """
    filled = int((current / maximum) * length) if maximum > 0 else 0
    filled = max(0, min(filled, length))
    cells = "▮" * filled
    if filled < length:
        cells += "[dim white]" + "▯" * (length - filled) + "[/]"
    return f"[{color}]{cells}[/]"
