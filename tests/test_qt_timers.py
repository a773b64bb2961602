from __future__ import annotations

import gc
import threading
import weakref

import pytest
from PySide6.QtCore import qInstallMessageHandler

from eventstreamer import Emitter, QtTimerScheduler
from eventstreamer.threading import timers


@pytest.mark.qt
def test_call_later_fires_once(qt_app, qtbot) -> None:
    fired: list[str] = []
    handle = QtTimerScheduler().call_later(10, fired.append, "tick")

    assert handle.is_active()
    qtbot.waitUntil(lambda: fired == ["tick"], timeout=1000)
    assert not handle.is_active()

    qtbot.wait(30)
    assert fired == ["tick"]


@pytest.mark.qt
def test_cancelled_call_never_fires(qt_app, qtbot) -> None:
    fired: list[str] = []
    handle = QtTimerScheduler().call_later(20, fired.append, "tick")

    handle.cancel()
    handle.cancel()

    assert not handle.is_active()
    qtbot.wait(60)
    assert fired == []


@pytest.mark.qt
def test_cancel_from_other_thread_is_safe(qt_app, qtbot) -> None:
    """Cancelling off the owning thread must not trigger Qt timer warnings."""
    messages: list[str] = []

    def _handler(mode, context, message):  # type: ignore[override]
        messages.append(str(message))

    previous = qInstallMessageHandler(_handler)
    try:
        fired: list[str] = []
        handle = QtTimerScheduler().call_later(50, fired.append, "tick")

        t = threading.Thread(target=handle.cancel)
        t.start()
        t.join(timeout=2.0)

        # Let the original fire time pass on the owning thread.
        qt_app.processEvents()
        qtbot.wait(100)
    finally:
        qInstallMessageHandler(previous)

    assert fired == []
    assert not any("Timers cannot be stopped from another thread" in m for m in messages)


def test_call_later_requires_application(monkeypatch) -> None:
    class _NoApp:
        @staticmethod
        def instance():
            return None

    monkeypatch.setattr(timers, "QCoreApplication", _NoApp)

    with pytest.raises(RuntimeError, match="QCoreApplication"):
        QtTimerScheduler().call_later(10, lambda: None)


def test_monotonic_ms_moves_forward() -> None:
    first = timers.monotonic_ms()
    second = timers.monotonic_ms()
    assert second >= first


@pytest.mark.qt
def test_emitter_debounces_on_qt_event_loop(qt_app, qtbot) -> None:
    emitter: Emitter[str] = Emitter()
    received: list[str] = []
    emitter.subscribe(received.append, debounce_ms=50)

    emitter.emit("first")
    emitter.emit("second")
    assert received == []

    qtbot.waitUntil(lambda: received == ["second"], timeout=1000)
    qtbot.wait(80)
    assert received == ["second"]
    assert "pending=0" in repr(emitter)


@pytest.mark.qt
def test_emitter_unsubscribe_cancels_qt_timer(qt_app, qtbot) -> None:
    emitter: Emitter[str] = Emitter()
    received: list[str] = []
    subscription = emitter.subscribe(received.append, debounce_ms=30)

    emitter.emit("value")
    subscription.unsubscribe()

    qtbot.wait(80)
    assert received == []


@pytest.mark.qt
def test_emitter_throttles_with_real_clock(qt_app, qtbot) -> None:
    emitter: Emitter[int] = Emitter()
    received: list[int] = []
    emitter.subscribe(received.append, throttle_ms=60_000)

    emitter.emit(1)
    emitter.emit(2)

    assert received == [1]


class _Payload:
    pass


@pytest.mark.qt
def test_fired_call_releases_its_arguments(qt_app, qtbot) -> None:
    received: list[_Payload] = []
    payload = _Payload()
    ref = weakref.ref(payload)

    handle = QtTimerScheduler().call_later(5, received.append, payload)
    del payload

    qtbot.waitUntil(lambda: not handle.is_active(), timeout=1000)
    assert received and received[0] is ref()

    received.clear()
    gc.collect()
    assert ref() is None


@pytest.mark.qt
def test_cancelled_call_releases_its_arguments(qt_app, qtbot) -> None:
    payload = _Payload()
    ref = weakref.ref(payload)

    handle = QtTimerScheduler().call_later(10_000, lambda value: None, payload)
    del payload
    handle.cancel()

    gc.collect()
    assert ref() is None


@pytest.mark.qt
def test_emitter_releases_debounced_values_after_delivery(qt_app, qtbot) -> None:
    emitter: Emitter[_Payload] = Emitter()
    received: list[_Payload] = []
    emitter.subscribe(received.append, debounce_ms=1)

    payload = _Payload()
    ref = weakref.ref(payload)
    emitter.emit(payload)
    del payload

    qtbot.waitUntil(lambda: len(received) == 1, timeout=1000)
    received.clear()
    gc.collect()

    assert ref() is None
    assert "pending=0" in repr(emitter)
