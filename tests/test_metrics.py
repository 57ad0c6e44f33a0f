import numpy as np
import pytest

from tract_matching.metrics import (
    DtwMetric,
    EuclideanMeanMetric,
    available_metrics,
    build_metric_set,
    dtw_from_cost,
    frechet_from_cost,
    get_metric,
    point_cost_matrix,
)

LINE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])


@pytest.mark.parametrize("name", ["euclidean_mean", "euclidean_max", "euclidean_std", "endpoints", "length", "dtw", "frechet", "hausdorff"])
def test_identical_curves_have_zero_distance(name):
    distance, flipped = get_metric(name).calculate_distance(LINE, LINE.copy())
    assert distance == pytest.approx(0.0)
    assert flipped is False


@pytest.mark.parametrize("name", ["euclidean_mean", "euclidean_max", "endpoints", "dtw", "frechet"])
def test_reversed_curve_reports_flip(name):
    distance, flipped = get_metric(name).calculate_distance(LINE, LINE[::-1].copy())
    assert distance == pytest.approx(0.0)
    assert flipped is True


def test_euclidean_mean_value():
    shifted = LINE + np.array([0.0, 3.0, 4.0])
    distance, _ = EuclideanMeanMetric().calculate_distance(LINE, shifted)
    assert distance == pytest.approx(5.0)


def test_length_difference():
    longer = LINE * 2.0
    distance, flipped = get_metric("length").calculate_distance(LINE, longer)
    assert distance == pytest.approx(2.0)
    assert flipped is False


def test_unknown_metric_raises():
    with pytest.raises(ValueError):
        get_metric("manhattan")


def test_build_metric_set_keeps_order_and_params():
    metrics = build_metric_set(["Euclidean_Mean", {"name": "dtw", "params": {"window_size": 2}}])
    assert [m.name for m in metrics] == ["euclidean_mean", "dtw"]
    assert isinstance(metrics[1], DtwMetric)
    assert metrics[1].window_size == 2


def test_build_metric_set_requires_name():
    with pytest.raises(ValueError):
        build_metric_set([{"params": {}}])


def test_available_metrics_lists_registry():
    assert "euclidean_mean" in available_metrics()
    assert available_metrics() == sorted(available_metrics())


def test_shape_mismatch_raises():
    with pytest.raises(ValueError):
        EuclideanMeanMetric().calculate_distance(LINE, LINE[:2])


SHIFTED = LINE + np.array([0.0, 1.0, 0.0])


def test_reversed_curve_reverses_cost_columns():
    cost = point_cost_matrix(LINE, SHIFTED)
    assert cost.shape == (3, 3)
    assert np.allclose(point_cost_matrix(LINE, SHIFTED[::-1]), cost[:, ::-1])


def test_warping_distances_on_parallel_lines():
    cost = point_cost_matrix(LINE, SHIFTED)
    assert dtw_from_cost(cost) == pytest.approx(3.0)
    assert frechet_from_cost(cost) == pytest.approx(1.0)


def test_dtw_window_limits_warping():
    stretched = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    free = DtwMetric().calculate_distance(LINE, stretched)[0]
    banded = DtwMetric(window_size=0).calculate_distance(LINE, stretched)[0]
    assert free == pytest.approx(1.0)
    assert banded == pytest.approx(2.0)

    with pytest.raises(ValueError):
        dtw_from_cost(point_cost_matrix(LINE, LINE), window_size=-1)


def test_cost_matrix_requires_points():
    with pytest.raises(ValueError):
        point_cost_matrix(np.zeros((0, 3)), LINE)
