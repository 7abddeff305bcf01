from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from shapekit.mesh import PolygonMesh
from shapekit.validation import InvalidArgument, require_count, require_positive

from .extrude import extrude_polygon, revolve_profile
from .transform import Z_AXIS, as_point, unit_vector


def _plane_basis(normal: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """In-plane x and y axes for a plane normal (arbitrary axis algorithm)."""

    n = unit_vector(normal, "normal")
    if abs(n[0]) < 1.0 / 64.0 and abs(n[1]) < 1.0 / 64.0:
        x_axis = np.cross([0.0, 1.0, 0.0], n)
    else:
        x_axis = np.cross([0.0, 0.0, 1.0], n)
    x_axis = x_axis / np.linalg.norm(x_axis)
    y_axis = np.cross(n, x_axis)
    return x_axis, y_axis


def points_on_circle(
    center: Sequence[float],
    normal: Sequence[float],
    radius: float,
    segments: int,
) -> np.ndarray:
    """Circle samples starting on the plane's x axis; the last point repeats the first."""

    center_vec = as_point(center, "center")
    radius = require_positive(radius, "radius")
    segments = require_count(segments, "segments", minimum=3)
    x_axis, y_axis = _plane_basis(normal)
    angles = 2.0 * np.pi * np.arange(segments) / segments
    pts = center_vec + radius * (np.outer(np.cos(angles), x_axis) + np.outer(np.sin(angles), y_axis))
    return np.vstack([pts, pts[:1]])


def ngon_points(radius: float, sides: int, z: float = 0.0) -> np.ndarray:
    """Open counter-clockwise n-gon in the plane z, first vertex on +X."""

    return points_on_circle((0.0, 0.0, z), (0.0, 0.0, 1.0), radius, sides)[:-1]


def check_torus(small_radius: float, outer_radius: float) -> None:
    if small_radius > outer_radius / 2.0:
        raise InvalidArgument("Small radius must be no more than half the outer radius.")


def check_tube(radius: float, thickness: float) -> None:
    if thickness >= radius:
        raise InvalidArgument("Wall thickness must be smaller than radius.")


def make_box(width: float = 1.0, depth: float = 1.0, height: float = 1.0) -> PolygonMesh:
    """Box with one corner on the origin, extruded up from the XY plane."""

    width = require_positive(width, "width")
    depth = require_positive(depth, "depth")
    height = require_positive(height, "height")
    base = [(0.0, 0.0, 0.0), (width, 0.0, 0.0), (width, depth, 0.0), (0.0, depth, 0.0)]
    return extrude_polygon(base, height)


def make_cylinder(radius: float = 1.0, height: float = 1.0, segments: int = 16) -> PolygonMesh:
    radius = require_positive(radius, "radius")
    height = require_positive(height, "height")
    segments = require_count(segments, "Number of segments", minimum=3)
    return extrude_polygon(ngon_points(radius, segments), height, soft_sides=True)


def make_prism(radius: float = 1.0, height: float = 1.0, sides: int = 6) -> PolygonMesh:
    """Right prism over a regular polygon inscribed in ``radius``."""

    radius = require_positive(radius, "radius")
    height = require_positive(height, "height")
    sides = require_count(sides, "Number of sides", minimum=3)
    return extrude_polygon(ngon_points(radius, sides), height)


def make_tube(
    radius: float = 1.0,
    thickness: float = 0.1,
    height: float = 1.0,
    segments: int = 16,
) -> PolygonMesh:
    radius = require_positive(radius, "radius")
    thickness = require_positive(thickness, "thickness")
    height = require_positive(height, "height")
    segments = require_count(segments, "Number of segments", minimum=3)
    check_tube(radius, thickness)
    outer = ngon_points(radius, segments)
    inner = ngon_points(radius - thickness, segments)
    return extrude_polygon(outer, height, inner=inner, soft_sides=True)


def _apex_solid(base: np.ndarray, height: float, soft_sides: bool) -> PolygonMesh:
    mesh = PolygonMesh()
    ring = [mesh.add_point(p) for p in base]
    apex = mesh.add_point((0.0, 0.0, height))
    mesh.add_polygon(*reversed(ring))
    count = len(ring)
    soft = (1, 2) if soft_sides else ()
    for j in range(count):
        k = (j + 1) % count
        mesh.add_polygon(ring[j], ring[k], apex, soft_edges=soft)
    return mesh


def make_cone(radius: float = 1.0, height: float = 1.0, segments: int = 16) -> PolygonMesh:
    """Circular cone; the slant edges are soft so the side renders smooth."""

    radius = require_positive(radius, "radius")
    height = require_positive(height, "height")
    segments = require_count(segments, "Number of segments", minimum=3)
    return _apex_solid(ngon_points(radius, segments), height, soft_sides=True)


def make_pyramid(radius: float = 1.0, height: float = 1.0, sides: int = 4) -> PolygonMesh:
    radius = require_positive(radius, "radius")
    height = require_positive(height, "height")
    sides = require_count(sides, "Number of sides", minimum=3)
    return _apex_solid(ngon_points(radius, sides), height, soft_sides=False)


def make_torus(
    small_radius: float = 0.25,
    outer_radius: float = 1.0,
    profile_segments: int = 16,
    sweep_segments: int = 16,
) -> PolygonMesh:
    """Torus whose overall outer radius is ``outer_radius``.

    The tube cross-section (``small_radius``) is sampled with
    ``profile_segments`` points and swept around Z in ``sweep_segments``
    steps.
    """

    small_radius = require_positive(small_radius, "small_radius")
    outer_radius = require_positive(outer_radius, "outer_radius")
    profile_segments = require_count(profile_segments, "Profile segments", minimum=3)
    sweep_segments = require_count(sweep_segments, "Sweep segments", minimum=3)
    check_torus(small_radius, outer_radius)
    profile = points_on_circle(
        (outer_radius - small_radius, 0.0, 0.0), (0.0, -1.0, 0.0), small_radius, profile_segments
    )
    return revolve_profile(profile, Z_AXIS, sweep_segments)


def _arc_profile(radius: float, start_deg: float, end_deg: float, steps: int) -> np.ndarray:
    angles = np.deg2rad(np.linspace(start_deg, end_deg, steps + 1))
    pts = np.column_stack([radius * np.cos(angles), np.zeros_like(angles), radius * np.sin(angles)])
    # pin the poles exactly onto the axis
    pts[np.isclose(np.abs(angles), np.pi / 2.0), 0] = 0.0
    return pts


def make_dome(radius: float = 1.0, segments: int = 4) -> PolygonMesh:
    """Open hemisphere; ``segments`` is the count per 90 degrees."""

    radius = require_positive(radius, "radius")
    segments = require_count(segments, "Number of segments", minimum=1)
    profile = _arc_profile(radius, 0.0, 90.0, segments)
    return revolve_profile(profile, Z_AXIS, segments * 4)


def make_sphere(radius: float = 1.0, segments: int = 4) -> PolygonMesh:
    """Closed sphere centred on the origin; ``segments`` is the count per 90 degrees."""

    radius = require_positive(radius, "radius")
    segments = require_count(segments, "Number of segments", minimum=1)
    profile = _arc_profile(radius, -90.0, 90.0, segments * 2)
    return revolve_profile(profile, Z_AXIS, segments * 4)


__all__ = [
    "check_torus",
    "check_tube",
    "make_box",
    "make_cone",
    "make_cylinder",
    "make_dome",
    "make_prism",
    "make_pyramid",
    "make_sphere",
    "make_torus",
    "make_tube",
    "ngon_points",
    "points_on_circle",
]
