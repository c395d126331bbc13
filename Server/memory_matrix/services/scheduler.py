"""
Scheduler Service

Timer abstraction used by the challenge engine for the pattern reveal and
the input countdown. Production runs delays as Flask-SocketIO background
tasks; tests drive a virtual clock by hand.
"""

import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """Handle for a scheduled callback; cancelling it is idempotent."""

    def __init__(self, delay_ms: int, callback: Callable[[], None]):
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def run(self) -> None:
        if not self.active:
            return
        self.fired = True
        self.callback()


class Scheduler(ABC):
    """Abstract one-shot timer scheduler."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        pass

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()


class SocketIOScheduler(Scheduler):
    """
    Runs each delay as a Flask-SocketIO background task.

    Uses ``socketio.sleep`` so the timer cooperates with whichever async
    mode (threading, eventlet, gevent) the server was started with.
    """

    def __init__(self, socketio):
        self.socketio = socketio

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms, callback)
        self.socketio.start_background_task(self._run, handle)
        return handle

    def _run(self, handle: TimerHandle) -> None:
        self.socketio.sleep(handle.delay_ms / 1000.0)
        handle.run()


class SerializedScheduler(Scheduler):
    """Wraps another scheduler so every callback runs while holding ``lock``."""

    def __init__(self, inner: Scheduler, lock):
        self.inner = inner
        self.lock = lock

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        def locked_callback():
            with self.lock:
                callback()
        return self.inner.call_later(delay_ms, locked_callback)

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        self.inner.cancel(handle)


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler for tests.

    Nothing fires until ``advance`` moves the virtual clock; due callbacks
    then run in deadline order (ties in scheduling order), including ones
    scheduled by callbacks that fired earlier in the same advance.
    """

    def __init__(self):
        self.now_ms = 0
        self._queue: List[Tuple[int, int, TimerHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms, callback)
        heapq.heappush(self._queue, (self.now_ms + max(0, delay_ms), next(self._counter), handle))
        return handle

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            self.now_ms = deadline
            handle.run()
        self.now_ms = target

    def run_until_idle(self, limit_ms: int = 600_000) -> None:
        """Advance until no live timers remain (bounded by ``limit_ms``)."""
        start = self.now_ms
        while self.pending() and self.now_ms - start < limit_ms:
            self.advance(self._queue[0][0] - self.now_ms)

    def pending(self) -> int:
        self._queue = [item for item in self._queue if item[2].active]
        heapq.heapify(self._queue)
        return len(self._queue)
