from __future__ import annotations

import logging
import time
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_QUIESCENCE_SECONDS = 2.0


class QuiescenceGuard:
    """Global debounce that keeps property writes from re-triggering themselves.

    A notification is admitted only when at least ``window_seconds`` have
    passed since the last admitted one. The run timestamp is recorded on
    admission, before any processing starts.
    """

    def __init__(self, window_seconds: float = DEFAULT_QUIESCENCE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_run: Optional[float] = None

    @property
    def last_run(self) -> Optional[float]:
        return self._last_run

    def admit(self) -> bool:
        now = self._clock()
        if self._last_run is not None and now - self._last_run < self.window_seconds:
            LOGGER.debug("Suppressed notification %.2fs after the last run", now - self._last_run)
            return False
        self._last_run = now
        return True

    def reset(self) -> None:
        self._last_run = None
