"""Interchangeable curve distance metrics.

Each metric is a small stateless object with a ``calculate_distance`` method
returning ``(distance, flipped)``. ``flipped`` reports whether the second curve
matched better in reversed orientation; metrics that ignore orientation always
report ``False``. Curves are numpy arrays shaped (N, 3) of equal length.

The warping metrics (DTW, Fréchet) work on a point cost matrix computed once
per curve pair; reversing the second curve only reverses the matrix columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Tuple

import numpy as np
from scipy.spatial.distance import cdist, directed_hausdorff

Curve = np.ndarray  # shape (N, 3)
MetricResult = Tuple[float, bool]


class MetricStrategy(Protocol):
    name: str

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        ...


def _as_curve_pair(curve_a: Curve, curve_b: Curve) -> tuple[np.ndarray, np.ndarray]:
    """Float views of two (N, D) curves sharing the point dimension."""

    a = np.asarray(curve_a, dtype=float)
    b = np.asarray(curve_b, dtype=float)
    if a.ndim != 2 or b.ndim != 2 or a.shape[1] != b.shape[1]:
        raise ValueError(f"Curves must be (N, D) arrays with the same D, got {a.shape} and {b.shape}.")
    return a, b


def _point_distances(curve_a: np.ndarray, curve_b: np.ndarray) -> np.ndarray:
    if curve_a.shape != curve_b.shape:
        raise ValueError(f"Shape mismatch: {curve_a.shape} vs {curve_b.shape}.")
    return np.linalg.norm(curve_a - curve_b, axis=1)


def _best_orientation(curve_a: np.ndarray, curve_b: np.ndarray) -> tuple[np.ndarray, bool]:
    """Pointwise distances for whichever orientation of curve_b has the lower mean."""

    direct = _point_distances(curve_a, curve_b)
    reverse = _point_distances(curve_a, curve_b[::-1])
    if reverse.mean() < direct.mean():
        return reverse, True
    return direct, False


def _pick_orientation(direct: float, reverse: float) -> MetricResult:
    if reverse < direct:
        return float(reverse), True
    return float(direct), False


def point_cost_matrix(curve_a: Curve, curve_b: Curve) -> np.ndarray:
    """Euclidean distance between every point of curve_a (rows) and curve_b (columns)."""

    a, b = _as_curve_pair(curve_a, curve_b)
    if len(a) == 0 or len(b) == 0:
        raise ValueError("Curves must contain at least one point.")
    return cdist(a, b, metric="euclidean")


def dtw_from_cost(cost: np.ndarray, window_size: int | None = None) -> float:
    """
    Accumulated DTW cost over a point cost matrix.
    ``window_size`` bounds ``|i - j|`` (Sakoe-Chiba band); None means unbounded.
    """

    if window_size is not None and window_size < 0:
        raise ValueError("window_size must be non-negative or None.")
    rows, cols = cost.shape
    acc = np.full((rows + 1, cols + 1), np.inf, dtype=float)
    acc[0, 0] = 0.0

    for i in range(rows):
        lo, hi = 0, cols
        if window_size is not None:
            lo = max(0, i - window_size)
            hi = min(cols, i + window_size + 1)
        for j in range(lo, hi):
            acc[i + 1, j + 1] = cost[i, j] + min(acc[i, j + 1], acc[i + 1, j], acc[i, j])

    return float(acc[rows, cols])


def frechet_from_cost(cost: np.ndarray) -> float:
    """Discrete Fréchet coupling distance over a point cost matrix."""

    rows, cols = cost.shape
    coupling = np.empty((rows, cols), dtype=float)
    coupling[:, 0] = np.maximum.accumulate(cost[:, 0])
    coupling[0, :] = np.maximum.accumulate(cost[0, :])

    for i in range(1, rows):
        for j in range(1, cols):
            reach = min(coupling[i - 1, j], coupling[i - 1, j - 1], coupling[i, j - 1])
            coupling[i, j] = max(reach, cost[i, j])

    return float(coupling[-1, -1])


@dataclass(frozen=True)
class EuclideanMeanMetric:
    """Mean point-to-point distance, best of both orientations."""

    name: str = "euclidean_mean"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        dists, flipped = _best_orientation(curve_a, curve_b)
        return float(dists.mean()), flipped


@dataclass(frozen=True)
class EuclideanMaxMetric:
    """Largest point-to-point distance, best of both orientations."""

    name: str = "euclidean_max"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        direct = _point_distances(curve_a, curve_b).max()
        reverse = _point_distances(curve_a, curve_b[::-1]).max()
        return _pick_orientation(direct, reverse)


@dataclass(frozen=True)
class EuclideanStdMetric:
    """Spread of point-to-point distances in the orientation with the lower mean."""

    name: str = "euclidean_std"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        dists, flipped = _best_orientation(curve_a, curve_b)
        return float(dists.std()), flipped


@dataclass(frozen=True)
class EndpointMetric:
    """Mean distance between corresponding start and end points."""

    name: str = "endpoints"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        ends_a = curve_a[[0, -1]]
        direct = np.linalg.norm(ends_a - curve_b[[0, -1]], axis=1).mean()
        reverse = np.linalg.norm(ends_a - curve_b[[-1, 0]], axis=1).mean()
        return _pick_orientation(direct, reverse)


@dataclass(frozen=True)
class LengthMetric:
    """Absolute difference of polyline lengths."""

    name: str = "length"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        length_a = float(np.linalg.norm(np.diff(curve_a, axis=0), axis=1).sum())
        length_b = float(np.linalg.norm(np.diff(curve_b, axis=0), axis=1).sum())
        return abs(length_a - length_b), False


@dataclass(frozen=True)
class DtwMetric:
    """Dynamic time warping distance, best of both orientations."""

    name: str = "dtw"
    window_size: int | None = None

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        cost = point_cost_matrix(curve_a, curve_b)
        direct = dtw_from_cost(cost, self.window_size)
        reverse = dtw_from_cost(cost[:, ::-1], self.window_size)
        return _pick_orientation(direct, reverse)


@dataclass(frozen=True)
class FrechetMetric:
    """Discrete Fréchet distance, best of both orientations."""

    name: str = "frechet"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        cost = point_cost_matrix(curve_a, curve_b)
        return _pick_orientation(frechet_from_cost(cost), frechet_from_cost(cost[:, ::-1]))


@dataclass(frozen=True)
class HausdorffMetric:
    """Symmetric Hausdorff distance between the two point sets; orientation-free."""

    name: str = "hausdorff"

    def calculate_distance(self, curve_a: Curve, curve_b: Curve) -> MetricResult:
        curve_a, curve_b = _as_curve_pair(curve_a, curve_b)
        forward = directed_hausdorff(curve_a, curve_b)[0]
        backward = directed_hausdorff(curve_b, curve_a)[0]
        return float(max(forward, backward)), False


_REGISTRY: Dict[str, type] = {
    "euclidean_mean": EuclideanMeanMetric,
    "euclidean_max": EuclideanMaxMetric,
    "euclidean_std": EuclideanStdMetric,
    "endpoints": EndpointMetric,
    "length": LengthMetric,
    "dtw": DtwMetric,
    "frechet": FrechetMetric,
    "hausdorff": HausdorffMetric,
}


def available_metrics() -> List[str]:
    return sorted(_REGISTRY)


def get_metric(name: str, **params: Any) -> MetricStrategy:
    """Return a metric instance for a given metric name."""

    normalized = name.lower()
    if normalized not in _REGISTRY:
        raise ValueError(f"Unsupported distance metric: {name}")
    return _REGISTRY[normalized](**params)


def build_metric_set(specs: Iterable[str | Mapping[str, Any]]) -> List[MetricStrategy]:
    """
    Resolve metric specs into instances, keeping their order.
    A spec is either a name or a mapping with ``name`` and optional ``params``.
    """

    metrics: List[MetricStrategy] = []
    for spec in specs:
        if isinstance(spec, str):
            metrics.append(get_metric(spec))
            continue
        if "name" not in spec:
            raise ValueError(f"Metric spec is missing a name: {dict(spec)}")
        metrics.append(get_metric(str(spec["name"]), **dict(spec.get("params") or {})))
    return metrics
