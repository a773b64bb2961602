"""
Error handling decorators.

Errors are logged with context and then re-raised by default so failures
keep propagating to whoever invoked the wrapped callable.
"""
from typing import Callable, TypeVar, ParamSpec, Any, Optional
from functools import wraps
from eventstreamer.logging.logger import get_logger

P = ParamSpec('P')
T = TypeVar('T')

logger = get_logger(__name__)


def log_errors(
    logger_instance: Optional[Any] = None,
    message: str = "Error in {func_name}",
    log_level: str = "error",
    reraise: bool = True
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator to log errors with context before optionally re-raising.

    Args:
        logger_instance: Logger to use (defaults to module logger)
        message: Error message template (can use {func_name} placeholder)
        log_level: Logging level ('debug', 'info', 'warning', 'error')
        reraise: Whether to re-raise the exception after logging

    Returns:
        Decorated function that logs errors

    Example:
        @log_errors(logger, "Deferred call {func_name} failed")
        def fire() -> None:
            consumer(value)
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log = logger_instance or logger
                log_method = getattr(log, log_level, log.error)
                error_msg = message.format(func_name=getattr(func, "__name__", repr(func)))
                log_method(f"{error_msg}: {e}", exc_info=True)

                if reraise:
                    raise
                return None  # type: ignore
        return wrapper
    return decorator
