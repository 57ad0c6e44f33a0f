"""Directional bundle-to-bundle distance.

For every curve of the first bundle, the closest curve of the second bundle is
found per metric; these minima are summed over curves and metrics and
normalised by ``len(curves_a) * len(metrics)``. The size of the second bundle
does not enter the normalisation, so the distance is not symmetric.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from tract_matching.errors import NonFiniteDistanceError
from tract_matching.metrics import MetricStrategy

LOGGER = logging.getLogger(__name__)


def bundle_distance(
    curves_a: Sequence[np.ndarray],
    curves_b: Sequence[np.ndarray],
    metrics: Sequence[MetricStrategy],
    validate: bool = False,
) -> float:
    """
    Aggregate nearest-neighbour distance from curves_a to curves_b.

    Metric output is passed through unchecked unless ``validate`` is set, in
    which case NaN or infinite values raise :class:`NonFiniteDistanceError`.
    An empty ``curves_a`` (or empty metric list) yields NaN.
    """

    if len(curves_a) == 0 or len(metrics) == 0:
        LOGGER.debug("Empty curve or metric set; distance is undefined.")
        return math.nan

    total = 0.0
    for metric in metrics:
        for curve_a in curves_a:
            min_dist = math.inf
            for curve_b in curves_b:
                d, _flipped = metric.calculate_distance(curve_a, curve_b)
                if validate and not math.isfinite(d):
                    raise NonFiniteDistanceError(f"Metric {metric.name} returned non-finite distance {d}.")
                if d < min_dist:
                    min_dist = d
            total += min_dist

    total /= len(curves_a) * len(metrics)
    return float(total)
