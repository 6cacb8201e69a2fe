"""Randomized inter-request pacing.

The source site treats regular request cadence as a bot signature, so
every outbound fetch after the first is preceded by a pause drawn
uniformly from ``[min_seconds, max_seconds]``.  The pause is a scheduling
contract of the engine, not optional jitter.

Both the sleep coroutine and the random source are injectable so tests
can run the engine without real delays and assert the drawn values.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable

from specharvest.utils.errors import ConfigurationError
from specharvest.utils.logging import get_logger

SleepFn = Callable[[float], Awaitable[None]]


class RequestPacer:
    """Waits a uniformly random delay before each request except the first.

    Parameters
    ----------
    min_seconds:
        Lower bound of the delay window (inclusive).
    max_seconds:
        Upper bound of the delay window (inclusive).
    sleep:
        Coroutine used to wait; defaults to :func:`asyncio.sleep`.
    rng:
        Random source; defaults to a private :class:`random.Random`.
    """

    def __init__(
        self,
        min_seconds: float,
        max_seconds: float,
        sleep: SleepFn | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if min_seconds < 0 or max_seconds < min_seconds:
            raise ConfigurationError(
                message=(
                    f"Invalid delay window [{min_seconds}, {max_seconds}]: "
                    "bounds must be non-negative and min <= max"
                ),
            )
        self._min_seconds = float(min_seconds)
        self._max_seconds = float(max_seconds)
        self._sleep: SleepFn = sleep or asyncio.sleep
        self._rng = rng or random.Random()
        self._requests_seen = 0
        self._total_waited = 0.0
        self._logger = get_logger(__name__)

    @property
    def total_waited(self) -> float:
        """Sum of all delays awaited so far, in seconds."""
        return self._total_waited

    def next_delay(self) -> float:
        """Draw the next delay from the configured window."""
        return self._rng.uniform(self._min_seconds, self._max_seconds)

    async def before_request(self) -> float:
        """Pause before an outbound request.

        Returns the number of seconds waited (``0.0`` for the very first
        request of the process).
        """
        self._requests_seen += 1
        if self._requests_seen == 1:
            return 0.0
        delay = self.next_delay()
        self._logger.debug("request_pacing_delay", seconds=round(delay, 3))
        if delay > 0:
            await self._sleep(delay)
        self._total_waited += delay
        return delay
