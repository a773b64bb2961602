"""Timing constants for eventstreamer.

All timing values are in milliseconds unless otherwise noted.
"""

DEFAULT_PRIORITY = 0
"""Priority assigned to consumers that do not set one. Higher runs earlier."""

MIN_TIMER_DELAY_MS = 0
"""Smallest delay passed to the host timer facility."""

MS_PER_SECOND = 1000.0
"""Conversion factor for monotonic clock readings (seconds) to milliseconds."""
