from __future__ import annotations

import numpy as np
import pytest

from shapekit.mesh import Mesh, PolygonMesh, Polyline, analyze_mesh, triangulate_faces
from shapekit.modeling import translation_matrix
from shapekit.validation import InvalidArgument


def _square():
    mesh = PolygonMesh()
    mesh.add_polygon_points((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0))
    return mesh


def test_add_point_reuses_coincident_vertices():
    mesh = PolygonMesh()
    a = mesh.add_point((1.0, 2.0, 3.0))
    b = mesh.add_point((1.0, 2.0, 3.0 + 1e-9))
    c = mesh.add_point((1.0, 2.0, 3.1))
    assert a == b
    assert c != a
    assert mesh.n_vertices == 2
    assert mesh.point_index((1.0, 2.0, 3.1)) == c
    assert mesh.point_index((9.0, 9.0, 9.0)) is None


def test_add_point_rejects_nan():
    with pytest.raises(InvalidArgument):
        PolygonMesh().add_point((np.nan, 0.0, 0.0))


def test_add_polygon_validates_indices():
    mesh = PolygonMesh()
    for p in [(0, 0, 0), (1, 0, 0), (0, 1, 0)]:
        mesh.add_point(p)
    with pytest.raises(InvalidArgument):
        mesh.add_polygon(0, 1)
    with pytest.raises(InvalidArgument):
        mesh.add_polygon(0, 1, 3)
    with pytest.raises(InvalidArgument):
        mesh.add_polygon(0, 1, 1)
    with pytest.raises(InvalidArgument):
        mesh.add_polygon(0, 1, 2, soft_edges=(3,))
    assert mesh.add_polygon(0, 1, 2, soft_edges=(2,)) == 0
    assert mesh.polygons[0].soft_edges == frozenset({2})


def test_polygon_edges_wrap():
    mesh = _square()
    assert mesh.polygons[0].edges() == [(0, 1), (1, 2), (2, 3), (3, 0)]


def test_polygon_normals_follow_winding():
    mesh = _square()
    assert np.allclose(mesh.polygon_normals(), [[0.0, 0.0, 1.0]])


def test_feature_edges_skip_soft_and_smooth_edges():
    mesh = PolygonMesh()
    a, b, c, d = (mesh.add_point(p) for p in [(0, 0, 0), (1, 0, 0), (1, 1, 0.1), (0, 1, 0)])
    mesh.add_polygon(a, b, c)
    mesh.add_polygon(a, c, d)
    # the shared diagonal bends by about 6 degrees
    assert (a, c) in map(tuple, mesh.feature_edges(0.0))
    assert (a, c) not in map(tuple, mesh.feature_edges(12.0))
    assert mesh.feature_edges(12.0).shape == (4, 2)

    soft = PolygonMesh()
    a, b, c, d = (soft.add_point(p) for p in [(0, 0, 0), (1, 0, 0), (1, 1, 0.1), (0, 1, 0)])
    soft.add_polygon(a, b, c, soft_edges=(2,))
    soft.add_polygon(a, c, d, soft_edges=(0,))
    assert (a, c) not in map(tuple, soft.feature_edges(0.0))


def test_to_mesh_fan_triangulates():
    tri = _square().to_mesh()
    assert isinstance(tri, Mesh)
    assert tri.faces.tolist() == [[0, 1, 2], [0, 2, 3]]


def test_triangulate_faces_skips_short_faces():
    assert triangulate_faces([(0, 1)]).shape == (0, 3)


def test_analyze_open_surface():
    tri = _square().to_mesh()
    analysis = analyze_mesh(tri)
    assert tri.analysis is analysis
    assert analysis.boundary_edges == 4
    assert not analysis.is_watertight
    assert analysis.is_manifold
    assert analysis.issues() == ["4 boundary edges (not watertight)"]


def test_analyze_flags_degenerate_faces():
    tri = Mesh([(0, 0, 0), (1, 0, 0), (2, 0, 0)], [(0, 1, 2)])
    assert analyze_mesh(tri).has_degenerate_faces


def test_mesh_transform_copy():
    tri = _square().to_mesh()
    moved = tri.transform(translation_matrix((0.0, 0.0, 2.0)), inplace=False)
    assert moved.bounds[4] == pytest.approx(2.0)
    assert tri.bounds[4] == pytest.approx(0.0)


def test_polyline_length():
    line = Polyline([(0, 0, 0), (3, 0, 0), (3, 4, 0)])
    assert line.length() == pytest.approx(7.0)
    closed = Polyline([(0, 0, 0), (3, 0, 0), (3, 4, 0)], closed=True)
    assert closed.length() == pytest.approx(12.0)
    assert line.bounds == (0.0, 3.0, 0.0, 4.0, 0.0, 0.0)


def test_to_pyvista_keeps_polygons():
    poly = _square().to_pyvista(smooth_angle=12.0)
    assert poly.n_points == 4
    assert poly.n_cells == 1
    assert float(poly.field_data["__shapekit_smooth_angle__"][0]) == 12.0
