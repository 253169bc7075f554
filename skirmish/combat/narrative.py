"""
Narrative log sinks.

The combat manager appends every message to the state log and hands it to a
sink; the presentation layer decides what to do with it.
"""

from typing import Protocol

from rich.markup import escape

from skirmish.actions.results import CombatMessage
from skirmish.core.constants import MessageCategory
from skirmish.core.utils import cprint, crule


class NarrativeSink(Protocol):
    def append(self, message: CombatMessage) -> None: ...


class MemoryNarrativeSink:
    """Keeps the messages in a list."""

    def __init__(self) -> None:
        self.messages: list[CombatMessage] = []

    def append(self, message: CombatMessage) -> None:
        self.messages.append(message)

    def texts(self, category: MessageCategory | None = None) -> list[str]:
        """Returns the message texts, optionally of a single category."""
        return [
            message.text
            for message in self.messages
            if category is None or message.category == category
        ]


class ConsoleNarrativeSink:
    """Prints the messages to the console with rich."""

    def append(self, message: CombatMessage) -> None:
        category = message.category
        text = f"{category.emoji} {escape(message.text)}"
        if category == MessageCategory.TURN_START:
            crule(text, style=category.color)
        elif category in (MessageCategory.VICTORY, MessageCategory.DEFEAT):
            crule(category.colorize(text), style=category.color)
        else:
            cprint(f"    {category.colorize(text)}")
