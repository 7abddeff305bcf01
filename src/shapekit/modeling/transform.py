from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from shapekit.validation import DegenerateGeometry, InvalidArgument


def as_point(value: Sequence[float], label: str = "point") -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float).reshape(3)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{label} must be a 3D coordinate.") from exc
    if not np.all(np.isfinite(arr)):
        raise InvalidArgument(f"{label} must be finite.")
    return arr


def unit_vector(value: Sequence[float], label: str = "direction") -> np.ndarray:
    vec = as_point(value, label)
    norm = np.linalg.norm(vec)
    if norm == 0:
        raise DegenerateGeometry(f"{label} must be non-zero.")
    return vec / norm


@dataclass(frozen=True)
class Axis:
    """A line in space: a point on it and a unit direction."""

    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_point(self.origin, "axis origin"))
        object.__setattr__(self, "direction", unit_vector(self.direction, "axis direction"))

    @classmethod
    def coerce(cls, value: "Axis | Sequence[Sequence[float]]") -> "Axis":
        if isinstance(value, Axis):
            return value
        try:
            origin, direction = value
        except (TypeError, ValueError) as exc:
            raise InvalidArgument("axis must be an (origin, direction) pair.") from exc
        return cls(origin, direction)


Z_AXIS = Axis((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))


def translation_matrix(offset: Sequence[float]) -> np.ndarray:
    dx, dy, dz = as_point(offset, "offset")
    mat = np.eye(4)
    mat[:3, 3] = [dx, dy, dz]
    return mat


def rotation_matrix(
    axis: Sequence[float],
    angle_rad: float,
    origin: Sequence[float] = (0.0, 0.0, 0.0),
) -> np.ndarray:
    """Rotation by ``angle_rad`` about the line through ``origin`` along ``axis``."""

    x, y, z = unit_vector(axis, "rotation axis")
    c = np.cos(angle_rad)
    s = np.sin(angle_rad)
    C = 1.0 - c
    rot = np.array(
        [
            [x * x * C + c, x * y * C - z * s, x * z * C + y * s, 0.0],
            [y * x * C + z * s, y * y * C + c, y * z * C - x * s, 0.0],
            [z * x * C - y * s, z * y * C + x * s, z * z * C + c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=float,
    )
    center = as_point(origin, "origin")
    return translation_matrix(center) @ rot @ translation_matrix(-center)


def apply_transform(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1), dtype=float)])
    return (np.asarray(matrix, dtype=float) @ homogeneous.T).T[:, :3]


def rotate_points(points: np.ndarray, axis: Axis, angle_rad: float) -> np.ndarray:
    """Rodrigues rotation of ``points`` about ``axis``."""

    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    k = axis.direction
    p = pts - axis.origin
    cos_a = np.cos(angle_rad)
    sin_a = np.sin(angle_rad)
    cross = np.cross(k, p)
    dot = p @ k
    rotated = p * cos_a + cross * sin_a + np.outer(dot, k) * (1.0 - cos_a)
    return rotated + axis.origin


def distance_to_axis(points: np.ndarray, axis: Axis) -> np.ndarray:
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    rel = pts - axis.origin
    along = rel @ axis.direction
    radial = rel - np.outer(along, axis.direction)
    return np.linalg.norm(radial, axis=1)


__all__ = [
    "Axis",
    "Z_AXIS",
    "apply_transform",
    "as_point",
    "distance_to_axis",
    "rotate_points",
    "rotation_matrix",
    "translation_matrix",
    "unit_vector",
]
