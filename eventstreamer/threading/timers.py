"""Cancellable deferred calls on the Qt event loop.

Debounced deliveries are the only deferred work the emitter does. They are
armed with ``QTimer.singleShot`` so they run later on the event loop of the
thread that armed them, never on a worker thread.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Optional, Tuple

from PySide6.QtCore import QCoreApplication, QTimer

from eventstreamer.constants.timing import MIN_TIMER_DELAY_MS, MS_PER_SECOND
from eventstreamer.logging.logger import get_logger
from eventstreamer.logging.tags import TAG_TIMER
from eventstreamer.utils.decorators import log_errors

logger = get_logger(__name__)


def monotonic_ms() -> float:
    """Monotonic clock reading in milliseconds."""
    return time.monotonic() * MS_PER_SECOND


class TimerHandle:
    """Handle for one pending deferred call.

    The handle holds the callable and its arguments only while the call is
    pending. Firing or cancelling drops both, so a spent handle never keeps
    a delivered value alive. ``cancel`` is idempotent and only flips a flag,
    so it is safe from any thread.
    """

    def __init__(self, func: Callable[..., Any], args: Tuple[Any, ...], description: str) -> None:
        self._func: Optional[Callable[..., Any]] = func
        self._args: Tuple[Any, ...] = args
        self._done = False
        self.description = description

    def cancel(self) -> None:
        if self._done:
            return
        self._release()
        logger.debug("%s Cancelled deferred call %s", TAG_TIMER, self.description)

    def is_active(self) -> bool:
        return not self._done

    def _release(self) -> None:
        self._done = True
        self._func = None
        self._args = ()

    def _take(self) -> Optional[Tuple[Callable[..., Any], Tuple[Any, ...]]]:
        if self._done or self._func is None:
            return None
        call = (self._func, self._args)
        self._release()
        return call

    def __repr__(self) -> str:
        return f"TimerHandle({self.description!r}, active={self.is_active()})"


class QtTimerScheduler:
    """Schedules single-shot calls with QTimer.

    Requires a QCoreApplication (or QApplication) instance and a running
    event loop for the calls to fire.
    """

    def call_later(self, delay_ms: int, func: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run ``func(*args)`` once after ``delay_ms`` milliseconds.

        Returns:
            TimerHandle that cancels the call if it has not fired yet.

        Raises:
            RuntimeError: If no QCoreApplication exists.
        """
        if QCoreApplication.instance() is None:
            raise RuntimeError("call_later requires a QCoreApplication instance")

        description = getattr(func, "__qualname__", None) or repr(func)
        handle = TimerHandle(func, args, description)

        escaped = description.replace("{", "{{").replace("}", "}}")

        @log_errors(logger, f"{TAG_TIMER} Deferred call {escaped} raised")
        def _invoke() -> None:
            call = handle._take()
            if call is None:
                return
            target, target_args = call
            target(*target_args)

        QTimer.singleShot(max(MIN_TIMER_DELAY_MS, int(delay_ms)), _invoke)
        logger.debug("%s Armed deferred call %s (%s ms)", TAG_TIMER, description, delay_ms)
        return handle
