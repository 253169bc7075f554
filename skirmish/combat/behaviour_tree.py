"""
Minimal behaviour tree used by the companion decision module.

Leaves read and write a shared context dictionary; the ``"bb"`` key is the
blackboard where a leaf leaves its choice for the next one.
"""

from collections.abc import Callable
from enum import Enum, auto
from typing import Any


class BTStatus(Enum):
    SUCCESS = auto()
    FAILURE = auto()
    RUNNING = auto()


class Node:
    """Base class of every node of the tree."""

    name: str = ""

    def tick(self, ctx: dict[str, Any]) -> BTStatus:
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class Action(Node):
    """A leaf running a function of the context."""

    def __init__(self, fn: Callable[[dict[str, Any]], BTStatus], name: str | None = None):
        self.fn = fn
        self.name = name or fn.__name__

    def tick(self, ctx: dict[str, Any]) -> BTStatus:
        return self.fn(ctx)


class Condition(Node):
    """A leaf that succeeds when its test does."""

    def __init__(self, test: Callable[[dict[str, Any]], bool], name: str | None = None):
        self.test = test
        self.name = name or test.__name__

    def tick(self, ctx: dict[str, Any]) -> BTStatus:
        return BTStatus.SUCCESS if self.test(ctx) else BTStatus.FAILURE


class Sequence(Node):
    """Runs its children in order until one does not succeed."""

    def __init__(self, *children: Node, name: str = "sequence"):
        self.children: list[Node] = list(children)
        self.name = name

    def tick(self, ctx: dict[str, Any]) -> BTStatus:
        for child in self.children:
            status = child.tick(ctx)
            if status != BTStatus.SUCCESS:
                return status
        return BTStatus.SUCCESS


class Selector(Node):
    """Runs its children in order until one does not fail."""

    def __init__(self, *children: Node, name: str = "selector"):
        self.children: list[Node] = list(children)
        self.name = name

    def tick(self, ctx: dict[str, Any]) -> BTStatus:
        for child in self.children:
            status = child.tick(ctx)
            if status != BTStatus.FAILURE:
                return status
        return BTStatus.FAILURE
