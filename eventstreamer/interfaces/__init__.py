"""
Abstract interfaces implemented by eventstreamer components.
"""

from typing import Any, Callable, Optional
from abc import ABC, abstractmethod


class IPublisher(ABC):
    """Subscribe-side view of an emitter.

    Producers can hand this out to consumers without exposing emit().
    """

    @abstractmethod
    def subscribe(
        self,
        consumer: Callable[[Any], None],
        options: Optional[Any] = None,
        **overrides: Any,
    ) -> Any:
        """Register a consumer and return its Subscription handle."""
        pass


__all__ = ['IPublisher']
