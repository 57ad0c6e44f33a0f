"""Error types raised by the tract matching engine."""

from __future__ import annotations


class TractMatchingError(RuntimeError):
    """Base error for failures inside the matching engine."""


class NoMetricSelectedError(ValueError):
    """Raised when a match is requested without any distance metric."""


class NonFiniteDistanceError(TractMatchingError):
    """Raised in validation mode when a metric returns NaN or an infinite value."""


__all__ = [
    "TractMatchingError",
    "NoMetricSelectedError",
    "NonFiniteDistanceError",
]
