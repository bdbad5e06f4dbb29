"""
Delayed callbacks with cancellation handles

The engine never sleeps; anything time-deferred (auto-advance) goes
through a Scheduler, which returns a handle with cancel(). Superseded
handles are cancelled so a stale callback can't touch a newer session.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, Optional


class ScheduledCall(ABC):
    """Handle for a pending delayed callback."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Runs a callback after a delay on the engine's single thread."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """
        Schedule `callback` to run after `delay` seconds.

        Returns:
            Handle whose cancel() prevents the callback from running
        """
        pass


class _TimerCall(ScheduledCall):
    """Wraps an asyncio.TimerHandle."""

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop's call_later.

    Without an explicit loop, the loop running at call time is used.
    Raises RuntimeError when there is no running loop or the loop is closed.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        loop = self._loop or asyncio.get_running_loop()
        if loop.is_closed():
            raise RuntimeError("Event loop is closed")
        return _TimerCall(loop.call_later(max(0.0, delay), callback))


class VirtualTimer(ScheduledCall):
    """A callback pending on a VirtualClock."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class VirtualClock(Scheduler):
    """
    Manually advanced scheduler.

    Time only moves when advance() is called, which makes delayed
    behavior deterministic in tests and in synchronous front-ends.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: list[tuple[float, int, VirtualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualTimer:
        timer = VirtualTimer(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still due to fire."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing due callbacks in order.

        Callbacks scheduled while advancing fire too if they fall due
        before the new time.

        Args:
            seconds: How far to move the clock

        Returns:
            Number of callbacks fired
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            self.now = when
            if timer.cancelled():
                continue
            timer.callback()
            fired += 1
        self.now = target
        return fired
