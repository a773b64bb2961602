"""eventstreamer: typed in-process publish/subscribe."""

from eventstreamer.events import (
    EMPTY_SUBSCRIPTION,
    Consumer,
    ConsumerOptions,
    Emitter,
    Scheduler,
    Subscription,
)
from eventstreamer.interfaces import IPublisher
from eventstreamer.threading import QtTimerScheduler, TimerHandle
from eventstreamer.versioning import APP_VERSION as __version__

__all__ = [
    'EMPTY_SUBSCRIPTION',
    'Consumer',
    'ConsumerOptions',
    'Emitter',
    'IPublisher',
    'QtTimerScheduler',
    'Scheduler',
    'Subscription',
    'TimerHandle',
    '__version__',
]
