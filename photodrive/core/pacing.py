"""
Randomized pauses between repeated calls to the same external service.

This is rate limiting, not error backoff: the pause happens between
successful calls, and nothing here retries anything.
"""

import random
import time
from typing import Callable, Optional

from .logging import get_logger

logger = get_logger(__name__)


class Pacer:
    """
    Sleeps a random, bounded interval between consecutive calls.

    The first call to wait() returns immediately; every later call sleeps
    between min_delay and max_delay seconds.
    """

    def __init__(
        self,
        min_delay: float = 2.0,
        max_delay: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError("Pacer requires 0 <= min_delay <= max_delay")
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._calls = 0

    @property
    def enabled(self) -> bool:
        return self.max_delay > 0

    def next_delay(self) -> float:
        """Draw the next delay in seconds."""
        return self._rng.uniform(self.min_delay, self.max_delay)

    def wait(self) -> float:
        """
        Pause before the next call.

        Returns:
            Seconds slept (0.0 for the first call or when disabled)
        """
        self._calls += 1
        if self._calls == 1 or not self.enabled:
            return 0.0

        delay = self.next_delay()
        logger.debug("pacer_waiting", delay_seconds=round(delay, 2))
        self._sleep(delay)
        return delay


def no_pacing() -> Pacer:
    """A Pacer that never sleeps."""
    return Pacer(0.0, 0.0)
