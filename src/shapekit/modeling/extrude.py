from __future__ import annotations

from typing import Sequence

import numpy as np

from shapekit.mesh import PolygonMesh
from shapekit.validation import (
    InvalidArgument,
    require_count,
    require_positive,
    require_profile,
    require_real,
)

from .transform import (
    Axis,
    apply_transform,
    as_point,
    distance_to_axis,
    rotate_points,
    rotation_matrix,
    translation_matrix,
    unit_vector,
)


def _weld_tolerance(points: np.ndarray, tolerance: float) -> float:
    # relative to the size of the geometry so small profiles keep distinct vertices
    scale = float(np.abs(points).max())
    return tolerance * scale if scale > 0 else tolerance


def _is_coplanar(points: np.ndarray, tolerance: float) -> bool:
    origin = points[0]
    rel = points[1:] - origin
    scale = max(float(np.abs(rel).max()), 1.0)
    rank = np.linalg.matrix_rank(rel, tol=tolerance * scale)
    return rank <= 2


def revolve_profile(
    profile: Sequence[Sequence[float]],
    axis: Axis | Sequence[Sequence[float]],
    segments: int,
    planar: bool | None = True,
    tolerance: float = 1e-9,
) -> PolygonMesh:
    """Sweep ``profile`` a full turn around ``axis`` in ``segments`` steps.

    Profile points lying on the axis collapse to a single pole vertex and the
    band next to them becomes a triangle fan. Between two full rings the band
    is made of quads, or of triangle pairs when ``planar`` is False. With
    ``planar=None`` each quad is tested for coplanarity and split only when
    its corners do not share a plane. ``tolerance`` is relative to the
    largest profile coordinate and governs both pole detection and vertex
    welding.
    """

    pts = require_profile(profile)
    segments = require_count(segments, "segments")
    axis = Axis.coerce(axis)

    weld = _weld_tolerance(pts, tolerance)
    mesh = PolygonMesh(tolerance=weld)
    step = 2.0 * np.pi / segments
    on_axis = distance_to_axis(pts, axis) <= weld

    rings: list[list[int]] = []
    for point, is_pole in zip(pts, on_axis):
        if is_pole:
            rings.append([mesh.add_point(point)])
            continue
        images = np.vstack([rotate_points(point, axis, k * step) for k in range(segments)])
        rings.append([mesh.add_point(image) for image in images])

    vertices = mesh.vertices
    for i in range(len(rings) - 1):
        ring1, ring2 = rings[i], rings[i + 1]
        pole1, pole2 = bool(on_axis[i]), bool(on_axis[i + 1])
        if pole1 and pole2:
            continue
        for j in range(segments):
            jp1 = (j + 1) % segments
            if pole1:
                _add_face(mesh, ring1[0], ring2[jp1], ring2[j])
            elif pole2:
                _add_face(mesh, ring1[j], ring1[jp1], ring2[0])
            else:
                quad = (ring1[j], ring1[jp1], ring2[jp1], ring2[j])
                use_quad = planar
                if planar is None:
                    use_quad = _is_coplanar(vertices[list(quad)], tolerance=1e-9)
                if use_quad:
                    _add_face(mesh, *quad)
                else:
                    _add_face(mesh, ring1[j], ring1[jp1], ring2[jp1])
                    _add_face(mesh, ring1[j], ring2[jp1], ring2[j])

    return mesh


def _add_face(mesh: PolygonMesh, *indices: int) -> None:
    # coincident profile points collapse faces that would repeat a vertex
    if len(set(indices)) < 3:
        return
    if len(set(indices)) < len(indices):
        unique: list[int] = []
        for index in indices:
            if index not in unique:
                unique.append(index)
        indices = tuple(unique)
    mesh.add_polygon(*indices)


def extrude_profile(
    profile: Sequence[Sequence[float]],
    center: Sequence[float],
    direction: Sequence[float],
    total_angle: float,
    segments: int,
) -> PolygonMesh:
    """Sweep a closed ``profile`` along a screw path.

    Each step moves the profile by ``direction / segments`` and twists it by
    ``total_angle / segments`` radians about the line through ``center``
    along ``direction``. ``segments`` rings are produced, the first being the
    profile itself. Every quad between two rings is split into two triangles
    whose diagonal and ring edges are marked soft. A closed profile may
    repeat its first point at the end; the repeat is dropped.
    """

    pts = require_profile(profile)
    segments = require_count(segments, "segments")
    total_angle = require_real(total_angle, "total_angle")
    center_vec = as_point(center, "center")
    direction_vec = as_point(direction, "direction")
    axis_dir = unit_vector(direction_vec, "direction")
    weld = _weld_tolerance(np.vstack([pts, center_vec, center_vec + direction_vec]), 1e-9)
    if pts.shape[0] > 2 and np.linalg.norm(pts[-1] - pts[0]) <= weld:
        pts = pts[:-1]

    step = translation_matrix(direction_vec / segments) @ rotation_matrix(
        axis_dir, total_angle / segments, center_vec
    )

    mesh = PolygonMesh(tolerance=weld)
    rings: list[list[int]] = []
    current = pts
    for _ in range(segments):
        rings.append([mesh.add_point(point) for point in current])
        current = apply_transform(step, current)

    count = pts.shape[0]
    for ring1, ring2 in zip(rings[:-1], rings[1:]):
        for j in range(count):
            k = (j + 1) % count
            mesh.add_polygon(ring1[j], ring2[k], ring1[k], soft_edges=(0, 2))
            mesh.add_polygon(ring1[j], ring2[j], ring2[k], soft_edges=(1, 2))
    return mesh


def extrude_polygon(
    outer: Sequence[Sequence[float]],
    height: float,
    inner: Sequence[Sequence[float]] | None = None,
    soft_sides: bool = False,
) -> PolygonMesh:
    """Push/pull a closed planar loop in the XY plane up by ``height``.

    ``outer`` is a counter-clockwise loop without a repeated closing point.
    With ``inner`` (same vertex count, also counter-clockwise) the caps
    become annular bands and an inner wall is added. ``soft_sides`` marks the
    vertical edges of the walls soft, for loops that approximate a circle.
    """

    base = require_profile(outer, minimum=3)
    if not np.allclose(base[:, 2], base[0, 2]):
        raise InvalidArgument("Loop must lie in a plane of constant z.")
    height = require_positive(height, "height")
    lift = np.array([0.0, 0.0, height])
    count = base.shape[0]

    wall_soft = (1, 3) if soft_sides else ()
    hole_soft = (0, 2) if soft_sides else ()

    mesh = PolygonMesh()
    bottom = [mesh.add_point(p) for p in base]
    top = [mesh.add_point(p + lift) for p in base]

    if inner is None:
        mesh.add_polygon(*reversed(bottom))
        mesh.add_polygon(*top)
    else:
        hole = require_profile(inner, minimum=3)
        if hole.shape[0] != count:
            raise InvalidArgument("Inner and outer loops must have the same number of points.")
        hole_bottom = [mesh.add_point(p) for p in hole]
        hole_top = [mesh.add_point(p + lift) for p in hole]
        for j in range(count):
            k = (j + 1) % count
            mesh.add_polygon(bottom[j], hole_bottom[j], hole_bottom[k], bottom[k], soft_edges=(0, 2))
            mesh.add_polygon(top[j], top[k], hole_top[k], hole_top[j], soft_edges=(1, 3))
            mesh.add_polygon(hole_bottom[j], hole_top[j], hole_top[k], hole_bottom[k], soft_edges=hole_soft)

    for j in range(count):
        k = (j + 1) % count
        mesh.add_polygon(bottom[j], bottom[k], top[k], top[j], soft_edges=wall_soft)
    return mesh


__all__ = ["extrude_polygon", "extrude_profile", "revolve_profile"]
