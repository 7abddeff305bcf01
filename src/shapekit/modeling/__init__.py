"""Modeling utilities: profile sweeps, helical paths, primitives and the shape registry."""

from __future__ import annotations

from .transform import Axis, Z_AXIS, rotation_matrix, translation_matrix
from .extrude import extrude_polygon, extrude_profile, revolve_profile
from .helix import (
    helix_handedness,
    helix_points,
    make_helical_ramp,
    make_helical_ramp_with_sides,
    make_helix,
    total_segments,
)
from .primitives import (
    make_box,
    make_cone,
    make_cylinder,
    make_dome,
    make_prism,
    make_pyramid,
    make_sphere,
    make_torus,
    make_tube,
    points_on_circle,
)
from .shapes import (
    SHAPES,
    LastUsedParameters,
    ShapeKind,
    ShapeRecord,
    build_shape,
    create_shape,
    default_parameters,
    edit_shape,
    get_schema,
    parameters_from_attributes,
    shape_attributes,
    validate_parameters,
)

__all__ = [
    "Axis",
    "Z_AXIS",
    "rotation_matrix",
    "translation_matrix",
    "extrude_polygon",
    "extrude_profile",
    "revolve_profile",
    "helix_handedness",
    "helix_points",
    "make_helical_ramp",
    "make_helical_ramp_with_sides",
    "make_helix",
    "total_segments",
    "make_box",
    "make_cone",
    "make_cylinder",
    "make_dome",
    "make_prism",
    "make_pyramid",
    "make_sphere",
    "make_torus",
    "make_tube",
    "points_on_circle",
    "SHAPES",
    "LastUsedParameters",
    "ShapeKind",
    "ShapeRecord",
    "build_shape",
    "create_shape",
    "default_parameters",
    "edit_shape",
    "get_schema",
    "parameters_from_attributes",
    "shape_attributes",
    "validate_parameters",
]
