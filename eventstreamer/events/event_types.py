"""
Subscription and option types for the emitter.
"""
import uuid
from dataclasses import dataclass, fields
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from eventstreamer.constants.timing import DEFAULT_PRIORITY

T = TypeVar('T')

Consumer = Callable[[T], None]

# Alternate spellings accepted when options come in as a mapping or keywords.
_OPTION_ALIASES = {
    'debounce': 'debounce_ms',
    'debounceMs': 'debounce_ms',
    'throttle': 'throttle_ms',
    'throttleMs': 'throttle_ms',
}


def _check_window(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int number of milliseconds, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True)
class ConsumerOptions:
    """Per-subscription delivery options.

    ``debounce_ms`` and ``throttle_ms`` are independent; when both are set the
    throttle window is checked first and a suppressed emit never arms the
    debounce timer. ``None`` or ``0`` disables either one.
    """
    priority: int = DEFAULT_PRIORITY
    once: bool = False
    debounce_ms: Optional[int] = None
    throttle_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise TypeError(f"priority must be an int, got {self.priority!r}")
        _check_window('debounce_ms', self.debounce_ms)
        _check_window('throttle_ms', self.throttle_ms)

    @property
    def debounced(self) -> bool:
        return bool(self.debounce_ms)

    @property
    def throttled(self) -> bool:
        return bool(self.throttle_ms)

    @classmethod
    def coerce(
        cls,
        options: Optional[Any] = None,
        **overrides: Any,
    ) -> 'ConsumerOptions':
        """Build options from None, a ConsumerOptions, or a mapping.

        Keyword overrides win over values taken from ``options``.

        Raises:
            TypeError: On unknown option names or an unsupported ``options`` type.
        """
        if options is None:
            values = {}
        elif isinstance(options, ConsumerOptions):
            if not overrides:
                return options
            values = {f.name: getattr(options, f.name) for f in fields(cls)}
        elif isinstance(options, Mapping):
            values = _normalize(options)
        else:
            raise TypeError(f"options must be a ConsumerOptions or a mapping, got {type(options).__name__}")

        values.update(_normalize(overrides))
        return cls(**values)


def _normalize(raw: Mapping[str, Any]) -> dict:
    known = {f.name for f in fields(ConsumerOptions)}
    values = {}
    for key, value in raw.items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in known:
            raise TypeError(f"unknown consumer option: {key!r}")
        values[name] = value
    return values


@dataclass
class Registration(Generic[T]):
    """One registry entry: the consumer and the options it subscribed with."""
    id: str
    consumer: Consumer
    options: ConsumerOptions


class Subscription:
    """Handle for one registration.

    ``unsubscribe()`` removes exactly the registration this handle was
    returned for. Calling it again is a no-op.
    """

    def __init__(
        self,
        subscription_id: Optional[str],
        unsubscribe: Optional[Callable[[str], None]] = None,
        is_active: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._id = subscription_id
        self._unsubscribe = unsubscribe
        self._is_active = is_active

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def active(self) -> bool:
        """True while the registration is still present in its emitter."""
        if self._id is None or self._is_active is None:
            return False
        return self._is_active(self._id)

    def unsubscribe(self) -> None:
        if self._id is None or self._unsubscribe is None:
            return
        self._unsubscribe(self._id)

    def __repr__(self) -> str:
        return f"Subscription(id={self._id!r}, active={self.active})"


EMPTY_SUBSCRIPTION = Subscription(None)
"""Returned when subscribe() is given something that is not callable."""


def new_subscription_id() -> str:
    return uuid.uuid4().hex


__all__ = [
    'Consumer',
    'ConsumerOptions',
    'EMPTY_SUBSCRIPTION',
    'Registration',
    'Subscription',
    'new_subscription_id',
]
