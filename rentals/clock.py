"""Time and identifier sources shared by the stores."""

from __future__ import annotations

import threading
import time
import uuid
from typing import Callable

Clock = Callable[[], int]
IdGenerator = Callable[[], str]


class MonotonicClock:
    """Wall-clock nanoseconds that never go backwards between calls."""

    def __init__(self, source: Callable[[], int] = time.time_ns) -> None:
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._last = max(self._last, int(self._source()))
            return self._last


def new_uuid() -> str:
    return str(uuid.uuid4())


__all__ = ["Clock", "IdGenerator", "MonotonicClock", "new_uuid"]
