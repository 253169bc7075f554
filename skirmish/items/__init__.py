"""
Items consumed by the combat engine.

Only weapons matter to combat: equipped weapons become attacks when an
encounter starts.
"""

from .weapon import Weapon

__all__ = ["Weapon"]
