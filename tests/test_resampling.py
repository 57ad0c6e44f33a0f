import numpy as np
import pytest

from tract_matching.resampling import resample_bundle, resample_tract


def test_two_point_tract_is_identity():
    tract = [(0.0, 1.0, 2.0), (3.0, 4.0, 5.0)]
    curve = resample_tract(tract, n_points=2)
    assert np.allclose(curve, np.array(tract))


def test_short_tract_is_zero_padded():
    curve = resample_tract([(1.0, 1.0, 1.0)], n_points=3)
    assert np.allclose(curve, [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]])


def test_empty_tract_gives_zero_curve():
    curve = resample_tract([], n_points=4)
    assert curve.shape == (4, 3)
    assert not curve.any()


def test_long_tract_is_redistributed_by_index():
    tract = np.array([[float(i), 0.0, 0.0] for i in range(5)])
    curve = resample_tract(tract, n_points=3)
    assert np.allclose(curve, [[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [4.0, 0.0, 0.0]])


def test_two_point_tract_upsampled_linearly():
    curve = resample_tract([(0.0, 0.0, 0.0), (3.0, 0.0, 0.0)], n_points=4)
    assert np.allclose(curve[:, 0], [0.0, 1.0, 2.0, 3.0])


def test_invalid_point_count_raises():
    with pytest.raises(ValueError):
        resample_tract([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], n_points=1)


def test_bundle_resampling_keeps_order_and_input():
    tract_a = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
    tract_b = np.array([[5.0, 5.0, 5.0], [6.0, 6.0, 6.0]])
    original_a = tract_a.copy()
    curves = resample_bundle([tract_a, tract_b], n_points=6)

    assert len(curves) == 2
    assert all(curve.shape == (6, 3) for curve in curves)
    assert np.allclose(curves[1][0], [5.0, 5.0, 5.0])
    assert np.array_equal(tract_a, original_a)

    curves[0][0] = 99.0
    assert np.array_equal(tract_a, original_a)
