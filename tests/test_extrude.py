from __future__ import annotations

import numpy as np
import pytest

from shapekit.modeling import (
    Axis,
    Z_AXIS,
    extrude_polygon,
    extrude_profile,
    points_on_circle,
    revolve_profile,
)
from shapekit.validation import DegenerateGeometry, InvalidArgument
from tests.helpers import is_watertight, signed_volume


def _azimuths_deg(mesh, polygon):
    pts = mesh.vertices[list(polygon.indices)]
    return {int(round(np.degrees(np.arctan2(y, x)))) % 360 for x, y, _ in pts}


def test_revolve_annulus_quads():
    mesh = revolve_profile([(1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], ((0, 0, 0), (0, 0, 1)), 4)
    assert mesh.n_vertices == 8
    assert mesh.n_polygons == 4
    assert mesh.polygon_sizes() == [4, 4, 4, 4]
    for j, polygon in enumerate(mesh.polygons):
        assert _azimuths_deg(mesh, polygon) == {(90 * j) % 360, (90 * (j + 1)) % 360}


@pytest.mark.parametrize("segments", [2, 3, 7, 24])
def test_revolve_counts_without_poles(segments):
    profile = [(1.0, 0.0, 0.0), (1.5, 0.0, 0.5), (1.2, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, segments)
    assert mesh.n_vertices == len(profile) * segments
    assert mesh.n_polygons == (len(profile) - 1) * segments
    assert set(mesh.polygon_sizes()) == {4}


def test_revolve_small_profile_keeps_distinct_rings():
    mesh = revolve_profile([(1e-7, 0.0, 0.0), (2e-7, 0.0, 0.0)], Z_AXIS, 4)
    assert mesh.n_vertices == 8
    assert mesh.n_polygons == 4
    assert set(mesh.polygon_sizes()) == {4}


def test_revolve_single_segment_collapses_bands():
    profile = [(1.0, 0.0, 0.0), (1.5, 0.0, 0.5), (1.2, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, 1)
    assert mesh.n_vertices == 3
    assert mesh.n_polygons == 0


def test_revolve_split_quads():
    profile = [(1.0, 0.0, 0.0), (1.5, 0.0, 0.5), (1.2, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, 6, planar=False)
    assert mesh.n_vertices == 18
    assert mesh.n_polygons == 2 * 2 * 6
    assert set(mesh.polygon_sizes()) == {3}


def test_revolve_coplanarity_test_keeps_symmetric_quads():
    profile = [(1.0, 0.0, 0.0), (2.0, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, 5, planar=None)
    assert mesh.polygon_sizes() == [4] * 5


def test_revolve_pole_fan():
    mesh = revolve_profile([(0.0, 0.0, 1.0), (1.0, 0.0, 0.0)], Z_AXIS, 6)
    assert mesh.n_vertices == 7
    assert mesh.n_polygons == 6
    pole = mesh.point_index((0.0, 0.0, 1.0))
    assert pole is not None
    for polygon in mesh.polygons:
        assert len(polygon) == 3
        assert pole in polygon.indices


@pytest.mark.parametrize("segments", [3, 8, 16])
def test_revolve_closed_by_two_poles(segments):
    profile = [(0.0, 0.0, -1.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, segments)
    assert mesh.n_vertices == segments + 2
    assert mesh.n_polygons == 2 * segments
    watertight, open_edges = is_watertight(mesh)
    assert watertight, open_edges
    assert signed_volume(mesh) > 0


def test_revolve_pole_pair_emits_nothing():
    mesh = revolve_profile([(0.0, 0.0, 0.0), (0.0, 0.0, 1.0)], Z_AXIS, 8)
    assert mesh.n_vertices == 2
    assert mesh.n_polygons == 0


def test_revolve_never_emits_zero_area_faces():
    profile = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 0.0, 1.0), (0.0, 0.0, 1.0)]
    mesh = revolve_profile(profile, Z_AXIS, 12)
    tri = mesh.to_mesh()
    v = tri.vertices[tri.faces]
    areas = np.linalg.norm(np.cross(v[:, 1] - v[:, 0], v[:, 2] - v[:, 0]), axis=1) / 2.0
    assert np.all(areas > 1e-9)


def test_revolve_about_offset_axis():
    axis = Axis((5.0, 0.0, 0.0), (0.0, 0.0, 2.0))
    mesh = revolve_profile([(6.0, 0.0, 0.0), (6.0, 0.0, 1.0)], axis, 4)
    assert np.allclose(mesh.bounds, (4.0, 6.0, -1.0, 1.0, 0.0, 1.0))


def test_revolve_rejects_bad_input():
    with pytest.raises(InvalidArgument):
        revolve_profile([(1.0, 0.0, 0.0)], Z_AXIS, 4)
    with pytest.raises(InvalidArgument):
        revolve_profile([(1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], Z_AXIS, 0)
    with pytest.raises(DegenerateGeometry):
        revolve_profile([(1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], ((0, 0, 0), (0, 0, 0)), 4)


SQUARE = [(1.0, 1.0, 0.0), (-1.0, 1.0, 0.0), (-1.0, -1.0, 0.0), (1.0, -1.0, 0.0)]


def test_extrude_profile_straight():
    mesh = extrude_profile(SQUARE, (0, 0, 0), (0, 0, 3), 0.0, 4)
    assert mesh.n_vertices == 16
    assert mesh.n_polygons == 3 * 4 * 2
    z_levels = sorted(set(np.round(mesh.vertices[:, 2], 9)))
    assert z_levels == pytest.approx([0.0, 0.75, 1.5, 2.25])


def test_extrude_profile_soft_edges():
    mesh = extrude_profile(SQUARE, (0, 0, 0), (0, 0, 1), 0.0, 2)
    softs = [polygon.soft_edges for polygon in mesh.polygons]
    assert softs[0::2] == [frozenset({0, 2})] * 4
    assert softs[1::2] == [frozenset({1, 2})] * 4


def test_extrude_profile_twists_about_center():
    mesh = extrude_profile([(1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], (0, 0, 0), (0, 0, 2), np.pi / 2.0, 2)
    half = np.sqrt(0.5)
    assert mesh.point_index((half, half, 1.0)) is not None
    assert mesh.point_index((2 * half, 2 * half, 1.0)) is not None


def test_extrude_profile_closed_circle():
    circle = points_on_circle((0, 0, 0), (0, 0, 1), 1.0, 8)
    assert np.allclose(circle[0], circle[-1])
    mesh = extrude_profile(circle, (0, 0, 0), (0, 0, 2), 0.0, 3)
    assert mesh.n_vertices == 8 * 3
    assert mesh.n_polygons == 2 * 8 * 2
    assert set(mesh.polygon_sizes()) == {3}


def test_extrude_profile_single_segment_has_one_ring():
    mesh = extrude_profile(SQUARE, (0, 0, 0), (0, 0, 1), 0.0, 1)
    assert mesh.n_vertices == 4
    assert mesh.n_polygons == 0


def test_extrude_profile_rejects_bad_input():
    with pytest.raises(DegenerateGeometry):
        extrude_profile(SQUARE, (0, 0, 0), (0, 0, 0), 0.0, 4)
    with pytest.raises(InvalidArgument):
        extrude_profile(SQUARE, (0, 0, 0), (0, 0, 1), 0.0, 0)
    with pytest.raises(InvalidArgument):
        extrude_profile(SQUARE[:1], (0, 0, 0), (0, 0, 1), 0.0, 4)


def test_extrude_polygon_solid():
    mesh = extrude_polygon([(0, 0, 0), (2, 0, 0), (2, 1, 0), (0, 1, 0)], 3.0)
    assert mesh.n_vertices == 8
    assert mesh.n_polygons == 6
    watertight, _ = is_watertight(mesh)
    assert watertight
    assert signed_volume(mesh) == pytest.approx(6.0)


def test_extrude_polygon_invalid_height():
    with pytest.raises(InvalidArgument):
        extrude_polygon([(0, 0, 0), (1, 0, 0), (0, 1, 0)], 0.0)


def test_extrude_polygon_rejects_tilted_loop():
    with pytest.raises(InvalidArgument):
        extrude_polygon([(0, 0, 0), (1, 0, 0), (0, 1, 1)], 1.0)
