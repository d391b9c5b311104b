"""Fixed-delay pacing for outbound calls to a single upstream."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Enforce a minimum spacing between consecutive calls.

    The lock is held across the read, the sleep and the write of the last-call
    timestamp, so concurrent callers queue up instead of firing together.
    """

    def __init__(
        self,
        min_interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: float | None = None

    def wait(self) -> None:
        with self._lock:
            if self._last_call is not None:
                remaining = self.min_interval_seconds - (self._clock() - self._last_call)
                if remaining > 0:
                    LOGGER.debug("Rate limit: sleeping %.3fs", remaining)
                    self._sleep(remaining)
            self._last_call = self._clock()
