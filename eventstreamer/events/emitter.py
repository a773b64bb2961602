"""
Typed in-process emitter.

Consumers subscribe to values of one type and receive them synchronously
in priority order, or with per-subscription timing policies (once,
throttle, debounce). All bookkeeping happens on the calling thread; the
only deferred work is a debounced delivery, which runs later on the host
timer facility.
"""
import inspect
import time
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol

from eventstreamer.events.event_types import (
    EMPTY_SUBSCRIPTION,
    Consumer,
    ConsumerOptions,
    Registration,
    Subscription,
    T,
    new_subscription_id,
)
from eventstreamer.interfaces import IPublisher
from eventstreamer.logging.logger import get_logger, is_trace_enabled
from eventstreamer.logging.tags import TAG_EMITTER, TAG_TRACE
from eventstreamer.threading.timers import QtTimerScheduler, monotonic_ms

logger = get_logger(__name__)


class CancellableHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Host timer facility used for debounced deliveries."""

    def call_later(self, delay_ms: int, func: Callable[..., Any], *args: Any) -> CancellableHandle: ...


def _same_consumer(a: Callable, b: Callable) -> bool:
    """Reference equality; bound methods match on the same instance and function."""
    if a is b:
        return True
    if inspect.ismethod(a) and inspect.ismethod(b):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


def _format_callback(callback: Callable) -> str:
    if hasattr(callback, '__qualname__'):
        return callback.__qualname__
    if hasattr(callback, '__name__'):
        return callback.__name__
    return repr(callback)


class Emitter(IPublisher, Generic[T]):
    """
    Publish values of type T to subscribed consumers.

    Delivery order for emit() is computed fresh on every call: descending
    priority, ties in subscription order. Consumer exceptions are not caught;
    they propagate to the caller and abort the rest of that emit.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        trace: Optional[bool] = None,
    ):
        """
        Args:
            scheduler: Timer facility for debounced deliveries (defaults to QtTimerScheduler)
            clock: Millisecond clock used for throttle windows (defaults to monotonic_ms)
            trace: Log per-consumer dispatch timing (defaults to EVENTSTREAMER_TRACE)
        """
        self._consumers: Dict[str, Registration[T]] = {}
        self._last_emit_times: Dict[str, float] = {}
        self._timers: Dict[str, CancellableHandle] = {}
        # Once registrations already consumed whose debounced delivery is pending.
        self._pending_once: Dict[str, Registration[T]] = {}
        self._scheduler = scheduler if scheduler is not None else QtTimerScheduler()
        self._clock = clock if clock is not None else monotonic_ms
        self._trace_enabled = is_trace_enabled() if trace is None else bool(trace)

    @property
    def size(self) -> int:
        """Number of current subscriptions."""
        return len(self._consumers)

    def __len__(self) -> int:
        return len(self._consumers)

    def __repr__(self) -> str:
        return f"Emitter(size={len(self._consumers)}, pending={len(self._timers)})"

    def subscribe(
        self,
        consumer: Consumer,
        options: Optional[Any] = None,
        **overrides: Any,
    ) -> Subscription:
        """Subscribe a consumer to receive emitted values.

        Args:
            consumer: Callable invoked with each emitted value
            options: ConsumerOptions or a mapping of option names
            **overrides: Individual options (priority, once, debounce_ms, throttle_ms)

        Returns:
            Subscription: Handle whose unsubscribe() removes this registration.
            A non-callable consumer is not registered and gets EMPTY_SUBSCRIPTION.
        """
        if not callable(consumer):
            logger.debug("%s Ignoring non-callable consumer %r", TAG_EMITTER, consumer)
            return EMPTY_SUBSCRIPTION

        opts = ConsumerOptions.coerce(options, **overrides)
        key = new_subscription_id()
        self._consumers[key] = Registration(key, consumer, opts)

        logger.debug(
            "%s Subscribed: id=%s, consumer=%s, options=%s",
            TAG_EMITTER,
            key,
            _format_callback(consumer),
            opts,
        )
        return Subscription(key, self._remove, self._consumers.__contains__)

    def emit(self, value: T) -> None:
        """Emit a value to all subscribed consumers, respecting their options."""
        # sorted() is stable, so equal priorities keep subscription order.
        ordered: List[Registration[T]] = sorted(
            self._consumers.values(),
            key=lambda reg: reg.options.priority,
            reverse=True,
        )

        for registration in ordered:
            key = registration.id
            if key not in self._consumers:
                # Removed earlier in this pass.
                continue

            options = registration.options
            if options.once:
                self._consumers.pop(key, None)
                self._last_emit_times.pop(key, None)

            if options.throttled:
                now = self._clock()
                last = self._last_emit_times.get(key)
                if last is not None and now - last < options.throttle_ms:
                    logger.debug(
                        "%s Throttled %s (%.1f ms since last delivery)",
                        TAG_EMITTER,
                        key,
                        now - last,
                    )
                    continue
                if not options.once:
                    self._last_emit_times[key] = now

            if options.debounced:
                self._schedule(registration, value)
                if options.once:
                    self._pending_once[key] = registration
            else:
                self._invoke(registration.consumer, value)

    def emit_to_consumer(self, consumer: Consumer, value: T) -> None:
        """Emit a value directly to every registration of one consumer.

        Priority, throttle and debounce are bypassed on this path.
        """
        for registration in list(self._consumers.values()):
            if not _same_consumer(registration.consumer, consumer):
                continue
            if registration.id not in self._consumers:
                continue
            if registration.options.once:
                self._remove(registration.id)
            self._invoke(registration.consumer, value)

    def clear(self) -> None:
        """Remove every subscription and cancel every pending deferred call."""
        for handle in self._timers.values():
            handle.cancel()
        count = len(self._consumers)
        self._consumers.clear()
        self._timers.clear()
        self._pending_once.clear()
        self._last_emit_times.clear()
        logger.debug("%s Cleared %d subscription(s)", TAG_EMITTER, count)

    def is_subscribed(self, consumer: Consumer) -> bool:
        """Return True if at least one registration holds this consumer."""
        return any(_same_consumer(reg.consumer, consumer) for reg in self._consumers.values())

    def unsubscribe_consumer(self, consumer: Consumer) -> None:
        """Remove the first registration holding this consumer, if any.

        A once registration that was already consumed but still has a
        debounced delivery pending counts as a match, and that delivery is
        cancelled.
        """
        for key, registration in self._consumers.items():
            if _same_consumer(registration.consumer, consumer):
                self._remove(key)
                return
        for key, registration in self._pending_once.items():
            if _same_consumer(registration.consumer, consumer):
                self._cancel_timer(key)
                logger.debug(
                    "%s Cancelled pending once delivery: id=%s, consumer=%s",
                    TAG_EMITTER,
                    key,
                    _format_callback(consumer),
                )
                return

    def _remove(self, key: str) -> None:
        registration = self._consumers.pop(key, None)
        self._last_emit_times.pop(key, None)
        self._cancel_timer(key)
        if registration is not None:
            logger.debug(
                "%s Unsubscribed: id=%s, consumer=%s",
                TAG_EMITTER,
                key,
                _format_callback(registration.consumer),
            )

    def _cancel_timer(self, key: str) -> None:
        self._pending_once.pop(key, None)
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _schedule(self, registration: Registration[T], value: T) -> None:
        key = registration.id
        self._cancel_timer(key)

        def _deliver() -> None:
            if self._timers.get(key) is handle:
                del self._timers[key]
            self._pending_once.pop(key, None)
            self._invoke(registration.consumer, value)

        delay_ms = registration.options.debounce_ms
        handle = self._scheduler.call_later(delay_ms, _deliver)
        self._timers[key] = handle
        logger.debug("%s Debounce armed: id=%s, delay=%s ms", TAG_EMITTER, key, delay_ms)

    def _invoke(self, consumer: Consumer, value: T) -> None:
        start_ts = time.perf_counter() if self._trace_enabled else 0.0
        if self._trace_enabled:
            logger.debug("%s dispatch.begin sub=%s", TAG_TRACE, _format_callback(consumer))
        try:
            consumer(value)
        except Exception as e:
            logger.debug(
                "%s Consumer %s raised %s; propagating",
                TAG_EMITTER,
                _format_callback(consumer),
                type(e).__name__,
            )
            raise
        finally:
            if self._trace_enabled:
                dur_ms = (time.perf_counter() - start_ts) * 1000.0
                logger.debug(
                    "%s dispatch.end sub=%s dur_ms=%.3f",
                    TAG_TRACE,
                    _format_callback(consumer),
                    dur_ms,
                )
