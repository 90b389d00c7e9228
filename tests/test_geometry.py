import math

import numpy as np
import pytest

from shapes import Affine2D, Rect, Size, UnitDisk, UnitSquare, ellipse_shape, rect_shape


def test_size_pixel_dims_truncate_toward_zero():
    assert Size(10.9, 3.2).pixel_dims() == (10, 3)
    assert Size(0.7, 5).pixel_dims() == (0, 5)


def test_vertical_flip_maps_top_to_bottom():
    flip = Affine2D.vertical_flip(100.0)
    assert np.allclose(flip.apply(np.array([3.0, 0.0])), [3.0, 100.0])
    assert np.allclose(flip.apply(np.array([3.0, 100.0])), [3.0, 0.0])
    # a flip applied twice is the identity
    twice = flip.then(flip)
    assert np.allclose(twice.A, np.eye(2))
    assert np.allclose(twice.t, 0.0)


def test_then_applies_self_first():
    T = Affine2D.from_translate(1.0, 2.0).then(Affine2D.from_scale(2.0))
    assert np.allclose(T.apply(np.array([0.0, 0.0])), [2.0, 4.0])


def test_inverse_round_trip():
    T = Affine2D.from_rotation(0.3).then(Affine2D.from_translate(5.0, -1.0)).then(Affine2D.from_scale(2.0, 0.5))
    pts = np.array([[0.0, 0.0], [1.0, 2.0], [-3.0, 4.5]])
    back = T.inverse_apply_many(T.apply_many(pts))
    assert np.allclose(back, pts)


def test_singular_transform_reports_itself():
    T = Affine2D.from_scale(0.0, 1.0)
    assert not T.is_invertible
    with pytest.raises(ValueError):
        T.inverse_apply(np.zeros(2))


def test_axis_aligned_flag():
    assert Affine2D.vertical_flip(10.0).is_axis_aligned
    assert not Affine2D.from_rotation(math.pi / 4).is_axis_aligned


def test_unit_shapes_sdf_sign():
    assert UnitDisk().contains(np.array([0.0, 0.0]))
    assert not UnitDisk().contains(np.array([0.8, 0.8]))
    assert UnitSquare().contains(np.array([0.49, -0.49]))
    assert not UnitSquare().contains(np.array([0.51, 0.0]))


def test_rect_and_ellipse_shapes_follow_rect():
    rect = Rect(10.0, 20.0, 40.0, 20.0)
    square = rect_shape(rect)
    ellipse = ellipse_shape(rect)
    pts = np.array([[11.0, 21.0], [30.0, 30.0], [49.0, 30.0], [60.0, 30.0]])
    assert square.contains_many(pts).tolist() == [True, True, True, False]
    assert ellipse.contains_many(pts).tolist() == [False, True, True, False]


def test_rect_corners_and_center():
    rect = Rect(1.0, 2.0, 3.0, 4.0)
    assert rect.center == (2.5, 4.0)
    assert rect.corners().tolist() == [[1.0, 2.0], [4.0, 2.0], [4.0, 6.0], [1.0, 6.0]]
    assert Rect.from_size(Size(5, 6)) == Rect(0.0, 0.0, 5.0, 6.0)
