"""Thread-safe progress accounting for the all-pairs search.

The matcher resets the counter with the number of curve comparisons it is
about to perform and workers add ticks as they finish bundle pairs. Callers
may poll ``value`` from another thread to drive a progress bar.
"""

from __future__ import annotations

import threading


class ProgressCounter:
    """Monotonic tick counter with a known upper bound."""

    def __init__(self, total: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = 0
        self._total = int(total)

    def reset(self, total: int) -> None:
        """Set the counter back to zero with a new upper bound."""

        if total < 0:
            raise ValueError("total must be non-negative.")
        with self._lock:
            self._value = 0
            self._total = int(total)

    def increment(self, step: int = 1) -> int:
        """Add ``step`` ticks and return the new value."""

        if step < 0:
            raise ValueError("Progress can only move forward.")
        with self._lock:
            self._value += step
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    @property
    def total(self) -> int:
        with self._lock:
            return self._total

    def fraction(self) -> float:
        """Completed share in [0, 1]; an empty workload counts as done."""

        with self._lock:
            if self._total == 0:
                return 1.0
            return self._value / self._total

    def __repr__(self) -> str:
        return f"ProgressCounter(value={self.value}, total={self.total})"
