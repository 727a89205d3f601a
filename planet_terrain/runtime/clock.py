# planet_terrain/runtime/clock.py

"""
================================================================================
ACCESS CLOCK
================================================================================
This module provides a small, self-contained clock for stamping chunk
accesses. The chunk caches use its readings to find the least-recently-used
entry, so the readings must never repeat or go backwards.

Data Contract:
---------------
- Public Methods:
    - now(): Returns the next access timestamp (integer nanoseconds).
- Side Effects: None.
- Invariants: Every reading is strictly greater than the previous one, even
  when the underlying monotonic clock has not advanced between two calls.
================================================================================
"""

import threading
import time


class AccessClock:
    """Issues strictly increasing timestamps based on time.monotonic_ns()."""

    def __init__(self, time_source=time.monotonic_ns):
        self._time_source = time_source
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            # A coarse clock can return the same value twice in a row.
            self._last = max(self._time_source(), self._last + 1)
            return self._last

    __call__ = now
