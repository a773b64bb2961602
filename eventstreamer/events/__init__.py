"""Emitter and subscription types."""

from .emitter import Emitter, Scheduler
from .event_types import EMPTY_SUBSCRIPTION, Consumer, ConsumerOptions, Subscription

__all__ = ['Emitter', 'Scheduler', 'EMPTY_SUBSCRIPTION', 'Consumer', 'ConsumerOptions', 'Subscription']
