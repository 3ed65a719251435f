"""
Bounded poll-and-check primitive.

X11 gives a short-lived process no "window created" notification, so the
only way to observe a change is to take snapshots until one satisfies a
predicate. poll_until() does that with a fixed interval and a hard
deadline, and tolerates transient fetch failures.
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..errors import ExternalToolError, PollTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def poll_until(
    fetch: Callable[[float], T],
    check: Callable[[T], Optional[R]],
    *,
    interval: float,
    timeout: float,
    transient: Tuple[Type[BaseException], ...] = (ExternalToolError,),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    timeout_error: Type[PollTimeout] = PollTimeout,
    description: str = "condition",
) -> R:
    """
    Call ``fetch`` every ``interval`` seconds until ``check`` accepts a value.

    The first fetch happens immediately. ``fetch`` is passed the seconds
    left before the deadline so that it can bound its own I/O. ``check``
    returns None to keep waiting, or the result to return. Exceptions
    listed in ``transient`` are logged and retried on the next tick.

    Args:
        fetch: Takes a fresh snapshot of external state, given the time left
        check: Maps a snapshot to a result, or None
        interval: Seconds between fetches
        timeout: Total seconds before giving up
        transient: Exception types swallowed and retried
        clock: Monotonic time source
        sleep: Sleep function
        timeout_error: PollTimeout subclass raised on expiry
        description: What is being waited for (for logs and errors)

    Returns:
        First non-None result of ``check``

    Raises:
        PollTimeout: (or ``timeout_error``) once the deadline has passed
    """
    start = clock()
    deadline = start + timeout
    attempts = 0
    failures = 0

    while True:
        attempts += 1
        try:
            value = fetch(max(deadline - clock(), 0.0))
        except transient as e:
            failures += 1
            logger.debug(f"Poll attempt {attempts} for {description} failed: {e}")
        else:
            result = check(value)
            if result is not None:
                logger.debug(
                    f"Poll for {description} succeeded after {attempts} attempts "
                    f"({clock() - start:.3f}s)"
                )
                return result

        remaining = deadline - clock()
        if remaining <= 0:
            elapsed = clock() - start
            if failures:
                logger.debug(f"{failures} of {attempts} poll attempts failed")
            raise timeout_error(
                f"timeout waiting for {description} after {elapsed:.1f}s",
                attempts=attempts,
                elapsed=elapsed,
            )

        sleep(min(interval, remaining))
