"""
Deferred continuations used to pace the encounter.

Companion and enemy turns resolve after a short delay so that the narrative
can be read, and the next turn starts after another one. A scheduler runs
those continuations and can cancel every pending one at once, which is what
happens when an encounter ends or is aborted.
"""

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

from catchery import log_debug


class ScheduledHandle(Protocol):
    def cancel(self) -> None: ...


class TurnScheduler(Protocol):
    """Runs callbacks after a delay, in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle: ...

    def cancel_all(self) -> None: ...


# =============================================================================
# Manual scheduler
# =============================================================================


class ManualHandle:
    """A pending callback of the manual scheduler."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    A scheduler driven by a virtual clock.

    Nothing runs until the owner advances the clock. Callbacks run in order
    of due time, then in order of scheduling; a callback scheduled while the
    clock is advancing runs in the same pass if it falls due.
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def cancel_all(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        if self._queue:
            log_debug(f"Cancelled {len(self._queue)} pending continuations")
        self._queue.clear()

    @property
    def pending(self) -> int:
        """Returns the number of callbacks still waiting."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Moves the clock forward and runs every callback that falls due.

        Args:
            seconds (float): How far to move the clock.

        Returns:
            int: The number of callbacks run.

        """
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1
        self.now = deadline
        return ran

    def run_all(self, limit: int = 10_000) -> int:
        """
        Runs callbacks until none is left, jumping the clock each time.

        Args:
            limit (int): Maximum number of callbacks to run.

        Returns:
            int: The number of callbacks run.

        """
        ran = 0
        while self._queue and ran < limit:
            due, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1
        return ran


# =============================================================================
# Asyncio scheduler
# =============================================================================


class AsyncioScheduler:
    """
    A scheduler running the callbacks on an asyncio event loop.

    Without an explicit loop it must be created from a running coroutine.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop or asyncio.get_running_loop()
        self._handles: set[asyncio.TimerHandle] = set()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        handle: asyncio.TimerHandle

        def run() -> None:
            self._handles.discard(handle)
            callback()

        handle = self.loop.call_later(max(0.0, delay), run)
        self._handles.add(handle)
        return handle

    def cancel_all(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    @property
    def pending(self) -> int:
        return len(self._handles)
