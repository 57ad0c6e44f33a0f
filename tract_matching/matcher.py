"""All-pairs nearest-match search between two bundle collections.

Both collections are resampled once up front. Every bundle of the first
collection is then compared against every bundle of the second with
:func:`tract_matching.aggregation.bundle_distance`; the first bundle reaching
the strict minimum wins. Rows of the outer loop are independent and run on a
joblib thread pool when ``n_jobs != 1``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from tract_matching.aggregation import bundle_distance
from tract_matching.errors import NoMetricSelectedError
from tract_matching.metrics import MetricStrategy
from tract_matching.progress import ProgressCounter
from tract_matching.resampling import DEFAULT_N_POINTS, resample_bundle

LOGGER = logging.getLogger(__name__)

NO_MATCH = -1


@dataclass
class MatchResult:
    """Best match per bundle of the first collection.

    ``indices[i]`` and ``distances[i]`` hold the winning bundle of the second
    collection and its distance. Rows that were never finished (cancellation)
    or found no finite candidate keep ``NO_MATCH`` / ``inf``; ``completed``
    tells the two cases apart.
    """

    indices: np.ndarray
    distances: np.ndarray
    completed: np.ndarray
    cancelled: bool = False
    progress: int = 0
    total: int = 0

    @property
    def incomplete(self) -> np.ndarray:
        return np.flatnonzero(~self.completed)

    def __len__(self) -> int:
        return len(self.indices)

    def to_frame(self) -> pd.DataFrame:
        """One row per bundle of the first collection."""

        return pd.DataFrame(
            {
                "bundle": np.arange(len(self.indices), dtype=int),
                "match_index": self.indices,
                "distance": self.distances,
                "completed": self.completed,
            }
        )


def _count_curves(collection: Sequence[Sequence[np.ndarray]]) -> int:
    return sum(len(curves) for curves in collection)


def match_bundles(
    collection1: Sequence[Sequence],
    collection2: Sequence[Sequence],
    metrics: Sequence[MetricStrategy],
    n_points: int = DEFAULT_N_POINTS,
    *,
    n_jobs: int = 1,
    progress: ProgressCounter | None = None,
    cancel_event: threading.Event | None = None,
    validate: bool = False,
) -> MatchResult:
    """
    For each bundle in collection1, find the bundle in collection2 with the lowest aggregate distance.
    Raises NoMetricSelectedError before touching the inputs when ``metrics`` is empty.
    """

    metrics = list(metrics or [])
    if not metrics:
        raise NoMetricSelectedError("No metric selected!")

    resampled1 = [resample_bundle(bundle, n_points) for bundle in collection1]
    resampled2 = [resample_bundle(bundle, n_points) for bundle in collection2]
    n_curves1 = _count_curves(resampled1)
    n_curves2 = _count_curves(resampled2)

    counter = progress if progress is not None else ProgressCounter()
    counter.reset(len(metrics) * n_curves1 * n_curves2)
    LOGGER.info(
        "Matching %d bundles (%d tracts) against %d bundles (%d tracts) with %d metric(s), n_points=%d",
        len(resampled1),
        n_curves1,
        len(resampled2),
        n_curves2,
        len(metrics),
        n_points,
    )

    n_rows = len(resampled1)
    indices = np.full(n_rows, NO_MATCH, dtype=int)
    distances = np.full(n_rows, np.inf, dtype=float)
    completed = np.zeros(n_rows, dtype=bool)

    def _is_cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def _match_row(i: int) -> None:
        if _is_cancelled():
            return
        curves_i = resampled1[i]
        best_index, best_distance = NO_MATCH, np.inf
        for j, curves_j in enumerate(resampled2):
            if _is_cancelled():
                return
            d = bundle_distance(curves_i, curves_j, metrics, validate=validate)
            counter.increment(len(metrics) * len(curves_i) * len(curves_j))
            if d < best_distance:
                best_index, best_distance = j, d
        indices[i] = best_index
        distances[i] = best_distance
        completed[i] = True
        LOGGER.debug("Bundle %d matched bundle %d (distance=%.4f)", i, best_index, best_distance)

    if n_jobs != 1 and n_rows > 1:
        Parallel(n_jobs=n_jobs, prefer="threads")(delayed(_match_row)(i) for i in range(n_rows))
    else:
        for i in range(n_rows):
            _match_row(i)

    cancelled = _is_cancelled() and not completed.all()
    if cancelled:
        LOGGER.warning("Matching cancelled; %d of %d bundles incomplete", int((~completed).sum()), n_rows)
    else:
        LOGGER.info("Matching finished after %d of %d comparisons", counter.value, counter.total)

    return MatchResult(
        indices=indices,
        distances=distances,
        completed=completed,
        cancelled=cancelled,
        progress=counter.value,
        total=counter.total,
    )


@dataclass
class TractDistanceMatcher:
    """Reusable matcher configuration with access to the last result.

    The ``progress`` counter is shared across calls so a caller can poll it
    from another thread while :meth:`match` runs.
    """

    metrics: List[MetricStrategy]
    n_points: int = DEFAULT_N_POINTS
    n_jobs: int = 1
    validate: bool = False
    progress: ProgressCounter = field(default_factory=ProgressCounter)
    last_result: MatchResult | None = field(default=None, init=False)

    def match(
        self,
        collection1: Sequence[Sequence],
        collection2: Sequence[Sequence],
        cancel_event: threading.Event | None = None,
    ) -> MatchResult:
        self.last_result = match_bundles(
            collection1,
            collection2,
            self.metrics,
            self.n_points,
            n_jobs=self.n_jobs,
            progress=self.progress,
            cancel_event=cancel_event,
            validate=self.validate,
        )
        return self.last_result

    @property
    def indices(self) -> List[int]:
        if self.last_result is None:
            return []
        return self.last_result.indices.tolist()

    @property
    def distances(self) -> List[float]:
        if self.last_result is None:
            return []
        return self.last_result.distances.tolist()
