"""
Skirmish combat resolution engine.

This package contains the turn-based combat core of the game: dice and bonus
calculations, encounter setup, the turn sequencer, action resolution,
companion decision making, outcome evaluation and the turn orchestrator.
"""

__version__ = "0.1.0"
