"""Standard logging tags for consistent log filtering.

Usage:
    from eventstreamer.logging.tags import TAG_EMITTER
    logger.debug("%s Subscribed %s", TAG_EMITTER, subscription_id)
"""

TAG_EMITTER = "[EMITTER]"
"""Subscription bookkeeping and dispatch."""

TAG_TIMER = "[TIMER]"
"""Deferred (debounced) invocations on the host timer facility."""

TAG_TRACE = "[TRACE]"
"""Per-consumer dispatch tracing, enabled by EVENTSTREAMER_TRACE."""
