"""Bounded polling with exponential backoff."""

from __future__ import annotations
import time
from typing import Callable

from .logging_config import get_logger

logger = get_logger()


def wait_until(
    condition: Callable[[], bool],
    timeout: float,
    description: str,
    initial_delay: float = 5.0,
    max_delay: float = 30.0,
    backoff: float = 2.0,
) -> bool:
    """
    Poll condition until it returns True or timeout seconds elapse.

    The delay between attempts starts at initial_delay, is multiplied by
    backoff after each attempt, and never exceeds max_delay or the time
    remaining. The condition is always evaluated once more at the deadline.

    Returns:
        True if the condition was met, False on timeout
    """
    deadline = time.monotonic() + timeout
    delay = initial_delay
    attempt = 1

    while True:
        if condition():
            logger.info(f"{description}: done after {attempt} check(s)")
            return True

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning(f"{description}: not finished after {timeout:.0f}s")
            return False

        sleep_time = min(delay, max_delay, remaining)
        logger.info(
            f"{description}: attempt {attempt}, sleeping {sleep_time:.0f}s "
            f"({remaining:.0f}s left)"
        )
        time.sleep(sleep_time)
        delay *= backoff
        attempt += 1
