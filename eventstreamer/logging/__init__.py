"""Logging helpers for eventstreamer."""

from .logger import (
    get_logger,
    is_trace_enabled,
    set_trace_enabled,
    setup_logging,
    teardown_logging,
)

__all__ = [
    'get_logger',
    'is_trace_enabled',
    'set_trace_enabled',
    'setup_logging',
    'teardown_logging',
]
