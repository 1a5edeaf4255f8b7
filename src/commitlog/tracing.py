"""Call tracing for public parser entry points."""

import functools
import logging
import time
from collections.abc import Callable
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


def traced(
    *, args: bool = False
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that logs entry, exit and duration of a call at DEBUG.

    Parser inputs can be whole-repository histories, so arguments are only
    included in the log record when ``args`` is True.

    Args:
        args: If True, include the call arguments in the entry record.

    Returns:
        Decorator function.

    Usage:
        @traced()
        def parse_simple(data: str, skip: int) -> tuple: ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        logger = logging.getLogger(func.__module__)
        name = func.__qualname__

        @functools.wraps(func)
        def wrapper(*call_args: P.args, **call_kwargs: P.kwargs) -> R:
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*call_args, **call_kwargs)

            if args:
                logger.debug("%s(%r, %r)", name, call_args, call_kwargs)
            else:
                logger.debug("%s()", name)
            start = time.perf_counter()
            try:
                return func(*call_args, **call_kwargs)
            finally:
                logger.debug(
                    "%s completed in %.1fms",
                    name,
                    (time.perf_counter() - start) * 1000,
                )

        return wrapper

    return decorator
