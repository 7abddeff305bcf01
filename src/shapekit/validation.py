from __future__ import annotations

import math
from typing import Sequence

import numpy as np


class ShapeError(ValueError):
    """Base error for shape generation failures."""


class InvalidArgument(ShapeError):
    """Raised when geometric input is malformed or out of range."""


class DegenerateGeometry(ShapeError):
    """Raised when input is well-formed but describes no usable geometry."""


def require_count(value: object, label: str, minimum: int = 1) -> int:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{label} must be an integer.") from exc
    if not math.isfinite(number) or number != int(number):
        raise InvalidArgument(f"{label} must be an integer.")
    count = int(number)
    if count < minimum:
        raise InvalidArgument(f"{label} must be >= {minimum}.")
    return count


def require_real(value: object, label: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{label} must be a number.") from exc
    if not math.isfinite(number):
        raise InvalidArgument(f"{label} must be finite.")
    return number


def require_positive(value: object, label: str) -> float:
    number = require_real(value, label)
    if number <= 0:
        raise InvalidArgument(f"{label} must be positive.")
    return number


def require_non_negative(value: object, label: str) -> float:
    number = require_real(value, label)
    if number < 0:
        raise InvalidArgument(f"{label} must not be negative.")
    return number


def require_profile(points: Sequence[Sequence[float]], minimum: int = 2) -> np.ndarray:
    try:
        arr = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument("Profile points must be 3D coordinates.") from exc
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidArgument("Profile points must be Nx3 points.")
    if arr.shape[0] < minimum:
        raise InvalidArgument(f"At least {minimum} profile points required.")
    if np.any(~np.isfinite(arr)):
        raise InvalidArgument("Profile points contain invalid values.")
    return arr.copy()
