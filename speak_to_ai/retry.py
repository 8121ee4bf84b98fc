"""Per-connection retries with a growing delay."""

from __future__ import annotations

import threading
import time
from typing import Callable, Hashable, TypeVar

from .logger import DefaultLogger, Logger

T = TypeVar("T")

_BASE_DELAY = 0.5
_MAX_DELAY = 5.0


class RetryTracker:
    """Runs operations again on failure, counting attempts per key."""

    def __init__(
        self,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
        logger: Logger | None = None,
    ) -> None:
        self.max_retries = max_retries
        self._sleep = sleep
        self._logger = logger if logger is not None else DefaultLogger()
        self._counts: dict[Hashable, int] = {}
        self._lock = threading.Lock()

    def execute_with_retry(self, fn: Callable[[], T], key: Hashable) -> T:
        """Call fn, retrying after failures; re-raise the last error when retries run out."""
        while True:
            with self._lock:
                current = self._counts.get(key, 0)
            try:
                result = fn()
            except Exception as exc:
                if current >= self.max_retries:
                    self.reset(key)
                    raise exc
            else:
                self.reset(key)
                return result

            with self._lock:
                self._counts[key] = current + 1
            self._sleep((current + 1) * _BASE_DELAY)
            self._logger.debug("Retrying operation, attempt %d/%d", current + 1, self.max_retries)

    def reset(self, key: Hashable) -> None:
        with self._lock:
            self._counts[key] = 0

    def count(self, key: Hashable) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def forget(self, key: Hashable) -> None:
        with self._lock:
            self._counts.pop(key, None)


def get_retry_backoff(attempt: int) -> float:
    """Delay in seconds for an attempt: linear, capped at 5s, plus up to 20% jitter."""
    delay = min(attempt * _BASE_DELAY, _MAX_DELAY)
    jitter = delay * 0.2 * ((time.time_ns() % 100) / 100.0)
    return delay + jitter