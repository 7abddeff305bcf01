from __future__ import annotations

import math
import warnings
from dataclasses import dataclass

import numpy as np

from shapekit.mesh import PolygonMesh, Polyline
from shapekit.validation import (
    DegenerateGeometry,
    InvalidArgument,
    require_count,
    require_non_negative,
    require_real,
)


@dataclass(frozen=True)
class HelixPath:
    """Sampled helical rail plus the values it was sampled with."""

    points: np.ndarray
    radii: np.ndarray
    elevations: np.ndarray
    azimuths: np.ndarray
    right_hand: bool
    total_segments: int


def helix_handedness(rotations: float, pitch: float) -> bool:
    """Return True for a right-hand helix.

    Rotations and pitch with the same sign wind right-handed, opposite signs
    wind left-handed. A flat helix (zero pitch) is always right-handed.
    """

    if rotations == 0:
        raise InvalidArgument("rotations must be non-zero.")
    if pitch == 0:
        return True
    return (rotations > 0) == (pitch > 0)


def total_segments(segments_per_rotation: int, rotations: float) -> int:
    exact = abs(segments_per_rotation * rotations)
    count = int(round(exact))
    if count < 1:
        raise InvalidArgument(
            "No. of rotations too small - must allow at least one segment to be drawn."
        )
    if not math.isclose(exact, count, rel_tol=0.0, abs_tol=1e-9):
        warnings.warn(
            f"{exact:.4g} segments requested; rounding to {count}.",
            RuntimeWarning,
            stacklevel=2,
        )
    return count


def helix_path(
    start_radius: float,
    end_radius: float,
    pitch: float,
    segments_per_rotation: int,
    rotations: float,
    start_angle_deg: float = 0.0,
    min_segments: int = 2,
) -> HelixPath:
    start_radius = require_non_negative(start_radius, "start_radius")
    end_radius = require_non_negative(end_radius, "end_radius")
    pitch = require_real(pitch, "pitch")
    rotations = require_real(rotations, "rotations")
    start_angle_deg = require_real(start_angle_deg, "start_angle")
    segments_per_rotation = require_count(
        segments_per_rotation, "Segments per rotation", minimum=min_segments
    )

    right_hand = helix_handedness(rotations, pitch)
    count = total_segments(segments_per_rotation, rotations)
    step = 2.0 * np.pi / segments_per_rotation
    if not right_hand:
        step = -step

    index = np.arange(count + 1, dtype=float)
    azimuths = np.deg2rad(start_angle_deg) + index * step
    radii = start_radius + index * (end_radius - start_radius) / count
    elevations = index * pitch / segments_per_rotation
    points = np.column_stack([radii * np.cos(azimuths), radii * np.sin(azimuths), elevations])
    return HelixPath(
        points=points,
        radii=radii,
        elevations=elevations,
        azimuths=azimuths,
        right_hand=right_hand,
        total_segments=count,
    )


def helix_points(
    start_radius: float,
    end_radius: float,
    pitch: float,
    segments_per_rotation: int,
    rotations: float,
    start_angle_deg: float = 0.0,
) -> np.ndarray:
    """Points of a helix from its start (z = 0) to its end, inclusive."""

    return helix_path(
        start_radius, end_radius, pitch, segments_per_rotation, rotations, start_angle_deg
    ).points


def make_helix(
    start_radius: float = 1.0,
    end_radius: float = 1.0,
    pitch: float = 1.0,
    segments_per_rotation: int = 16,
    rotations: float = 1.0,
    start_angle_deg: float = 0.0,
) -> Polyline:
    path = helix_path(
        start_radius, end_radius, pitch, segments_per_rotation, rotations, start_angle_deg
    )
    return Polyline(path.points)


def _ramp_rails(
    start_radius: float,
    end_radius: float,
    ramp_start_width: float,
    ramp_end_width: float,
    pitch: float,
    segments_per_rotation: int,
    rotations: float,
    start_angle_deg: float,
) -> tuple[HelixPath, np.ndarray]:
    ramp_start_width = require_non_negative(ramp_start_width, "Ramp start width")
    ramp_end_width = require_non_negative(ramp_end_width, "Ramp end width")
    inner = helix_path(
        start_radius,
        end_radius,
        pitch,
        segments_per_rotation,
        rotations,
        start_angle_deg,
        min_segments=3,
    )
    index = np.arange(inner.total_segments + 1, dtype=float)
    widths = ramp_start_width + index * (ramp_end_width - ramp_start_width) / inner.total_segments
    outer = _rail(inner.radii + widths, inner.azimuths, inner.elevations)
    return inner, outer


def _rail(radii: np.ndarray, azimuths: np.ndarray, elevations: np.ndarray) -> np.ndarray:
    return np.column_stack([radii * np.cos(azimuths), radii * np.sin(azimuths), elevations])


def make_helical_ramp(
    start_radius: float = 1.0,
    end_radius: float = 1.0,
    ramp_start_width: float = 1.0,
    ramp_end_width: float = 1.0,
    pitch: float = 1.0,
    segments_per_rotation: int = 16,
    rotations: float = 1.0,
    start_angle_deg: float = 0.0,
) -> PolygonMesh:
    """Ramp surface between an inner helix and an outer helix offset by the width."""

    inner, outer = _ramp_rails(
        start_radius,
        end_radius,
        ramp_start_width,
        ramp_end_width,
        pitch,
        segments_per_rotation,
        rotations,
        start_angle_deg,
    )
    mesh = PolygonMesh()
    for seg in range(1, inner.total_segments + 1):
        pt1, pt2 = inner.points[seg - 1], outer[seg - 1]
        pt3, pt4 = inner.points[seg], outer[seg]
        if inner.right_hand:
            _add_triangle(mesh, pt1, pt2, pt3)
            _add_triangle(mesh, pt2, pt4, pt3)
        else:
            _add_triangle(mesh, pt2, pt1, pt3)
            _add_triangle(mesh, pt4, pt2, pt3)
    return mesh


def make_helical_ramp_with_sides(
    start_radius: float = 1.0,
    end_radius: float = 1.0,
    ramp_start_width: float = 1.0,
    ramp_end_width: float = 1.0,
    pitch: float = 1.0,
    segments_per_rotation: int = 16,
    rotations: float = 1.0,
    start_angle_deg: float = 0.0,
    side_slope_deg: float = 45.0,
) -> PolygonMesh:
    """Helical ramp with sloped side walls running down to z = 0."""

    side_slope_deg = require_real(side_slope_deg, "Slope of sides")
    if not 0.0 < side_slope_deg < 90.0:
        raise InvalidArgument("Slope of sides must be between 0 and 90 degrees (exclusive).")
    inner, outer = _ramp_rails(
        start_radius,
        end_radius,
        ramp_start_width,
        ramp_end_width,
        pitch,
        segments_per_rotation,
        rotations,
        start_angle_deg,
    )
    inv_tan_slope = 1.0 / math.tan(math.radians(side_slope_deg))
    spread = np.abs(inner.elevations) * inv_tan_slope
    base_inner_radii = inner.radii - spread
    if np.any(base_inner_radii < -1e-9):
        raise DegenerateGeometry(
            "Inner side wall crosses the axis; increase the slope or the start radius."
        )
    base_inner_radii = np.maximum(base_inner_radii, 0.0)
    outer_radii = np.linalg.norm(outer[:, :2], axis=1)
    floor = np.zeros_like(inner.elevations)
    base_inner = _rail(base_inner_radii, inner.azimuths, floor)
    base_outer = _rail(outer_radii + spread, inner.azimuths, floor)

    mesh = PolygonMesh()
    for seg in range(1, inner.total_segments + 1):
        pt1, pt2 = inner.points[seg - 1], outer[seg - 1]
        pt3, pt4 = inner.points[seg], outer[seg]
        pt5, pt6 = base_inner[seg - 1], base_outer[seg - 1]
        pt7, pt8 = base_inner[seg], base_outer[seg]
        if inner.right_hand:
            _add_triangle(mesh, pt1, pt2, pt3)
            _add_triangle(mesh, pt2, pt4, pt3)
            _add_triangle(mesh, pt1, pt3, pt5)
            _add_triangle(mesh, pt3, pt7, pt5)
            _add_triangle(mesh, pt2, pt8, pt4)
            _add_triangle(mesh, pt2, pt6, pt8)
        else:
            _add_triangle(mesh, pt2, pt1, pt3)
            _add_triangle(mesh, pt4, pt2, pt3)
            _add_triangle(mesh, pt1, pt5, pt3)
            _add_triangle(mesh, pt3, pt5, pt7)
            _add_triangle(mesh, pt2, pt4, pt8)
            _add_triangle(mesh, pt2, pt8, pt6)
    return mesh


def _add_triangle(mesh: PolygonMesh, *points: np.ndarray) -> None:
    indices = [mesh.add_point(p) for p in points]
    # zero-width rails and the z = 0 start of the side walls collapse corners
    if len(set(indices)) == 3:
        mesh.add_polygon(*indices)


__all__ = [
    "HelixPath",
    "helix_handedness",
    "helix_path",
    "helix_points",
    "make_helical_ramp",
    "make_helical_ramp_with_sides",
    "make_helix",
    "total_segments",
]
