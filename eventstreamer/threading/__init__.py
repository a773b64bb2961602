"""Host timer facility used for deferred (debounced) deliveries."""

from .timers import QtTimerScheduler, TimerHandle, monotonic_ms

__all__ = ['QtTimerScheduler', 'TimerHandle', 'monotonic_ms']
