from __future__ import annotations

import numpy as np
import pytest

from shapekit.modeling import Axis, make_box, rotation_matrix, translation_matrix
from shapekit.modeling.transform import apply_transform, distance_to_axis, rotate_points
from shapekit.validation import DegenerateGeometry


def _bounds(mesh):
    return np.array(mesh.bounds, dtype=float)


def test_translate_bounds():
    base = make_box(2.0, 4.0, 6.0).to_mesh()
    moved = base.transform(translation_matrix((1.0, 2.0, 3.0)), inplace=False)
    assert np.allclose(_bounds(moved), np.array([1.0, 3.0, 2.0, 6.0, 3.0, 9.0]))
    assert np.allclose(_bounds(base), np.array([0.0, 2.0, 0.0, 4.0, 0.0, 6.0]))


def test_rotate_axis_z_90():
    mat = rotation_matrix((0.0, 0.0, 1.0), np.pi / 2.0)
    assert np.allclose(apply_transform(mat, [(1.0, 0.0, 0.0)]), [[0.0, 1.0, 0.0]], atol=1e-12)


def test_rotation_about_offset_origin():
    mat = rotation_matrix((0.0, 0.0, 2.0), np.pi / 2.0, origin=(1.0, 0.0, 0.0))
    assert np.allclose(apply_transform(mat, [(2.0, 0.0, 5.0)]), [[1.0, 1.0, 5.0]], atol=1e-12)


def test_rotate_points_matches_matrix():
    axis = Axis((1.0, -1.0, 0.5), (1.0, 2.0, 3.0))
    pts = np.array([[0.3, 0.2, 0.1], [2.0, -1.0, 4.0]])
    angle = 0.7
    expected = apply_transform(rotation_matrix(axis.direction, angle, axis.origin), pts)
    assert np.allclose(rotate_points(pts, axis, angle), expected)


def test_distance_to_axis():
    axis = Axis((0.0, 0.0, 0.0), (0.0, 0.0, 5.0))
    assert np.allclose(distance_to_axis([(3.0, 4.0, 9.0), (0.0, 0.0, -2.0)], axis), [5.0, 0.0])


def test_zero_axis_is_degenerate():
    with pytest.raises(DegenerateGeometry):
        Axis((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    with pytest.raises(DegenerateGeometry):
        rotation_matrix((0.0, 0.0, 0.0), 1.0)
