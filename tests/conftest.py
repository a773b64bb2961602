"""
Shared pytest fixtures for eventstreamer tests.
"""
import os
import sys
from typing import Any, Callable, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: float = 0.0):
        self.now = float(start_ms)

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeTimerHandle:
    def __init__(self, due: float, seq: int, func: Callable[..., Any], args: tuple):
        self.due = due
        self.seq = seq
        self.func = func
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def is_active(self) -> bool:
        return not (self.cancelled or self.fired)


class FakeScheduler:
    """Virtual-time stand-in for QtTimerScheduler.

    Deferred calls only run from advance(), in due-time order, with the
    shared FakeClock moved to each call's due time before it runs.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.handles: List[FakeTimerHandle] = []
        self._seq = 0

    def call_later(self, delay_ms: int, func: Callable[..., Any], *args: Any) -> FakeTimerHandle:
        self._seq += 1
        handle = FakeTimerHandle(self.clock.now + delay_ms, self._seq, func, args)
        self.handles.append(handle)
        return handle

    def pending(self) -> List[FakeTimerHandle]:
        return [h for h in self.handles if h.is_active()]

    def advance(self, ms: float) -> None:
        target = self.clock.now + ms
        while True:
            due: Optional[FakeTimerHandle] = None
            for handle in self.pending():
                if handle.due <= target and (due is None or (handle.due, handle.seq) < (due.due, due.seq)):
                    due = handle
            if due is None:
                break
            self.clock.now = due.due
            due.fired = True
            due.func(*due.args)
        self.clock.now = target


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture
def emitter(scheduler, clock):
    """Emitter on virtual time."""
    from eventstreamer import Emitter
    em = Emitter(scheduler=scheduler, clock=clock)
    yield em
    em.clear()


@pytest.fixture
def recorder():
    """Callable that records every value it receives."""
    class Recorder:
        def __init__(self):
            self.calls: List[Any] = []

        def __call__(self, value: Any) -> None:
            self.calls.append(value)

    return Recorder
