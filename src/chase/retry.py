"""Fixed-delay retry used for transient file system failures."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def try_until(
    operation: Callable[[], T],
    max_attempts: int | None = None,
    delay: float | None = None,
    retry_on: tuple[type[BaseException], ...] = (OSError,),
) -> T:
    """
    Call ``operation`` until it succeeds or the attempt budget runs out.

    The operation always runs at least once. ``max_attempts=None`` retries
    forever. Between attempts the same ``delay`` (seconds) is slept; there is
    no backoff growth.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total number of attempts allowed, or None for unbounded
        delay: Seconds to sleep between attempts, or None to retry immediately
        retry_on: Exception types that count as a failed attempt; anything
            else propagates straight away

    Returns:
        Whatever ``operation`` returned on its first successful attempt.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except retry_on as e:
            if max_attempts is not None and attempt >= max_attempts:
                raise
            logger.debug(f"Attempt {attempt} failed ({e}), retrying")
            if delay:
                time.sleep(delay)
