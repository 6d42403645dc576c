"""Randomized politeness delay for network requests."""

from __future__ import annotations

import random
import time
from collections.abc import Callable

from html2rss import settings


class RandomDelay:
    """Sleep a random interval drawn uniformly from ``[low, high]`` seconds.

    *rng* and *sleep* are injectable so tests can run without real pauses.
    """

    def __init__(
        self,
        low: float = settings.REQUEST_DELAY_RANGE[0],
        high: float = settings.REQUEST_DELAY_RANGE[1],
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if low < 0 or high < low:
            raise ValueError(f"invalid delay range: ({low}, {high})")
        self.low = low
        self.high = high
        self._rng = rng or random.Random()
        self._sleep = sleep

    def next_delay(self) -> float:
        return self._rng.uniform(self.low, self.high)

    def wait(self) -> float:
        """Block for one randomized interval and return its length."""
        delay = self.next_delay()
        if delay > 0:
            self._sleep(delay)
        return delay
