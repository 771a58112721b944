"""Retry decorator with exponential backoff and an optional hard deadline.

Usage:
    from ldap_sync_harness.utils.retry import retry

    @retry(max_retries=10, initial_delay=0.5, backoff=2.0, max_delay=5.0,
           timeout=60.0, exceptions=(OSError,))
    def probe(...):
        ...
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
T = TypeVar("T")


def retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    timeout: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
):
    """Retry decorator with exponential backoff.

    Args:
        max_retries: Number of retry attempts (in addition to the first try)
        initial_delay: Base delay before first retry in seconds
        max_delay: Maximum delay cap between retries
        backoff: Exponential backoff factor (e.g., 2.0 doubles each time)
        exceptions: Tuple of exception types to catch and retry
        timeout: Hard deadline in seconds across all attempts; delays are
            clipped to it and no retry is scheduled once it has passed
        sleep: Sleep function, replaceable in tests
        clock: Monotonic clock, replaceable in tests
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            deadline = None if timeout is None else clock() + timeout
            last_exc: Exception | None = None
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exc = e
                    if attempt >= max_retries:
                        break
                    sleep_time = min(initial_delay * (backoff**attempt), max_delay)
                    if deadline is not None:
                        remaining = deadline - clock()
                        if remaining <= 0:
                            break
                        sleep_time = min(sleep_time, remaining)
                    sleep(sleep_time)
            assert last_exc is not None
            raise last_exc

        return wrapper

    return decorator
