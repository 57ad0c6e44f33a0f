"""Tract resampling to fixed-length curves.

Every tract (an ordered list of 3D points) is turned into an ``(n_points, 3)``
array. Tracts with two or more points are redistributed by normalised point
index; shorter tracts are copied into the leading rows of a zero-filled
buffer, so a single point ``p`` resampled to three points yields
``[p, 0, 0]``.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import numpy as np

Curve = np.ndarray  # shape (n_points, 3)
DEFAULT_N_POINTS = 12

LOGGER = logging.getLogger(__name__)


def _as_points(tract: Iterable[Sequence[float]]) -> np.ndarray:
    """Private float copy of a tract shaped (M, 3)."""

    points = np.array(tract, dtype=float)
    if points.size == 0:
        return np.zeros((0, 3), dtype=float)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Tract points must have shape (M, 3), got {points.shape}.")
    return points


def _redistribute(points: np.ndarray, n_points: int) -> np.ndarray:
    """Linearly interpolate points over the index domain to exactly n_points."""

    source = np.linspace(0.0, 1.0, len(points))
    target = np.linspace(0.0, 1.0, n_points)
    return np.column_stack([np.interp(target, source, points[:, axis]) for axis in range(3)])


def resample_tract(tract: Iterable[Sequence[float]], n_points: int = DEFAULT_N_POINTS) -> Curve:
    """Resample one tract to a fixed-length curve without touching the input."""

    if n_points < 2:
        raise ValueError(f"n_points must be >= 2, got {n_points}.")

    points = _as_points(tract)
    if len(points) >= 2:
        points = _redistribute(points, n_points)

    curve = np.zeros((n_points, 3), dtype=float)
    count = min(len(points), n_points)
    curve[:count] = points[:count]
    return curve


def resample_bundle(
    bundle: Iterable[Iterable[Sequence[float]]],
    n_points: int = DEFAULT_N_POINTS,
    logger: logging.Logger | None = None,
) -> List[Curve]:
    """
    Resample every tract of a bundle, preserving tract order.
    Messages go to ``logger`` (module logger by default) instead of any shared stream.
    """

    log = logger or LOGGER
    curves = [resample_tract(tract, n_points) for tract in bundle]
    degenerate = sum(1 for curve in curves if not curve.any())
    if degenerate:
        log.debug("%d of %d tracts resampled to all-zero curves", degenerate, len(curves))
    log.debug("Resampled %d tracts to %d points", len(curves), n_points)
    return curves
