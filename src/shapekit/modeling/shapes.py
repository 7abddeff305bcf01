from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Literal, Mapping, Union

from shapekit.mesh import PolygonMesh, Polyline
from shapekit.validation import (
    InvalidArgument,
    require_count,
    require_non_negative,
    require_positive,
    require_real,
)

from . import helix, primitives

ParameterKind = Literal["length", "count", "angle", "real"]
LengthBound = Literal["positive", "non_negative", "any"]
Geometry = Union[PolygonMesh, Polyline]

ATTRIBUTE_DICTIONARY = "skpp"
CLASS_KEY = "class"
# facets of curved shapes bending less than this render smooth
SMOOTH_ANGLE = 30.0


class ShapeKind(str, Enum):
    BOX = "box"
    CYLINDER = "cylinder"
    CONE = "cone"
    TORUS = "torus"
    TUBE = "tube"
    PRISM = "prism"
    PYRAMID = "pyramid"
    DOME = "dome"
    SPHERE = "sphere"
    HELIX = "helix"
    HELICAL_RAMP = "helical_ramp"
    HELICAL_RAMP_WITH_SIDES = "helical_ramp_with_sides"


@dataclass(frozen=True)
class ParameterSpec:
    """One user-facing shape parameter.

    Length defaults are multiples of the unit default length; every other
    default is used as is.
    """

    name: str
    prompt: str
    kind: ParameterKind
    default: float
    bound: LengthBound = "positive"
    minimum: int = 1

    def default_value(self, unit_length: float) -> float | int:
        if self.kind == "length":
            return self.default * unit_length
        if self.kind == "count":
            return int(self.default)
        return self.default

    def coerce(self, value: Any) -> float | int:
        label = self.prompt
        if self.kind == "count":
            return require_count(value, label, minimum=self.minimum)
        if self.kind == "length":
            if self.bound == "positive":
                return require_positive(value, label)
            if self.bound == "non_negative":
                return require_non_negative(value, label)
        return require_real(value, label)


@dataclass(frozen=True)
class ShapeSchema:
    kind: ShapeKind
    label: str
    parameters: tuple[ParameterSpec, ...]
    build: Callable[[Mapping[str, Any]], Geometry]
    check: Callable[[Mapping[str, Any]], None] | None = None
    smooth_angle: float = 0.0

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.parameters)


def _length(name: str, prompt: str, default: float = 1.0, bound: LengthBound = "positive") -> ParameterSpec:
    return ParameterSpec(name, prompt, "length", default, bound=bound)


def _count(name: str, prompt: str, default: int, minimum: int) -> ParameterSpec:
    return ParameterSpec(name, prompt, "count", default, minimum=minimum)


def _check_torus(params: Mapping[str, Any]) -> None:
    primitives.check_torus(params["small_radius"], params["outer_radius"])


def _check_tube(params: Mapping[str, Any]) -> None:
    primitives.check_tube(params["radius"], params["thickness"])


def _check_rotations(params: Mapping[str, Any]) -> None:
    if round(abs(params["num_segments"] * params["rotations"])) < 1:
        raise InvalidArgument("No. of rotations too small - must allow at least one segment to be drawn.")


def _check_ramp_with_sides(params: Mapping[str, Any]) -> None:
    _check_rotations(params)
    if not 0.0 < params["slope"] < 90.0:
        raise InvalidArgument("Slope of sides must be between 0 and 90 degrees (exclusive).")


_HELIX_PARAMETERS = (
    _length("start_radius", "Start radius", bound="non_negative"),
    ParameterSpec("start_angle", "Start at (angle in degrees)", "angle", 0.0),
    _length("end_radius", "End radius", bound="non_negative"),
    _length("pitch", "Pitch (if negative, helix goes down)", bound="any"),
)
_RAMP_WIDTHS = (
    _length("ramp_start_width", "Width of ramp side to side at start", bound="non_negative"),
    _length("ramp_end_width", "Width of ramp side to side at end", bound="non_negative"),
)
_ROTATIONS = ParameterSpec("rotations", "No. of rotations (if negative, makes left hand helix)", "real", 1.0)


def _ramp_args(p: Mapping[str, Any]) -> Dict[str, Any]:
    return dict(
        start_radius=p["start_radius"],
        end_radius=p["end_radius"],
        ramp_start_width=p["ramp_start_width"],
        ramp_end_width=p["ramp_end_width"],
        pitch=p["pitch"],
        segments_per_rotation=p["num_segments"],
        rotations=p["rotations"],
        start_angle_deg=p["start_angle"],
    )


SHAPES: Dict[ShapeKind, ShapeSchema] = {
    schema.kind: schema
    for schema in (
        ShapeSchema(
            ShapeKind.BOX,
            "Box",
            (_length("width", "Width"), _length("depth", "Depth"), _length("height", "Height")),
            build=lambda p: primitives.make_box(p["width"], p["depth"], p["height"]),
        ),
        ShapeSchema(
            ShapeKind.CYLINDER,
            "Cylinder",
            (_length("radius", "Radius"), _length("height", "Height"), _count("num_segments", "Number of segments", 16, 3)),
            build=lambda p: primitives.make_cylinder(p["radius"], p["height"], p["num_segments"]),
        ),
        ShapeSchema(
            ShapeKind.CONE,
            "Cone",
            (_length("radius", "Radius"), _length("height", "Height"), _count("num_segments", "Number of segments", 16, 3)),
            build=lambda p: primitives.make_cone(p["radius"], p["height"], p["num_segments"]),
        ),
        ShapeSchema(
            ShapeKind.TORUS,
            "Torus",
            (
                _length("small_radius", "Profile radius", 0.25),
                _length("outer_radius", "Outer radius"),
                _count("s1", "Segments in profile", 16, 3),
                _count("s2", "Segments around torus", 16, 3),
            ),
            build=lambda p: primitives.make_torus(p["small_radius"], p["outer_radius"], p["s1"], p["s2"]),
            check=_check_torus,
            smooth_angle=SMOOTH_ANGLE,
        ),
        ShapeSchema(
            ShapeKind.TUBE,
            "Tube",
            (
                _length("radius", "Radius"),
                _length("thickness", "Wall thickness", 0.1),
                _length("height", "Height"),
                _count("num_segments", "Number of segments", 16, 3),
            ),
            build=lambda p: primitives.make_tube(p["radius"], p["thickness"], p["height"], p["num_segments"]),
            check=_check_tube,
        ),
        ShapeSchema(
            ShapeKind.PRISM,
            "Prism",
            (_length("radius", "Radius"), _length("height", "Height"), _count("num_sides", "Number of sides", 6, 3)),
            build=lambda p: primitives.make_prism(p["radius"], p["height"], p["num_sides"]),
        ),
        ShapeSchema(
            ShapeKind.PYRAMID,
            "Pyramid",
            (_length("radius", "Radius"), _length("height", "Height"), _count("num_segments", "Number of sides", 4, 3)),
            build=lambda p: primitives.make_pyramid(p["radius"], p["height"], p["num_segments"]),
        ),
        ShapeSchema(
            ShapeKind.DOME,
            "Dome",
            (_length("radius", "Radius"), _count("num_segments", "Segments (per 90 deg)", 4, 1)),
            build=lambda p: primitives.make_dome(p["radius"], p["num_segments"]),
            smooth_angle=SMOOTH_ANGLE,
        ),
        ShapeSchema(
            ShapeKind.SPHERE,
            "Sphere",
            (_length("radius", "Radius"), _count("num_segments", "Segments (per 90 deg)", 4, 1)),
            build=lambda p: primitives.make_sphere(p["radius"], p["num_segments"]),
            smooth_angle=SMOOTH_ANGLE,
        ),
        ShapeSchema(
            ShapeKind.HELIX,
            "Helix",
            (*_HELIX_PARAMETERS, _count("num_segments", "Segments per rotation", 16, 2), _ROTATIONS),
            build=lambda p: helix.make_helix(
                p["start_radius"], p["end_radius"], p["pitch"], p["num_segments"], p["rotations"], p["start_angle"]
            ),
            check=_check_rotations,
        ),
        ShapeSchema(
            ShapeKind.HELICAL_RAMP,
            "HelicalRamp",
            (*_HELIX_PARAMETERS, *_RAMP_WIDTHS, _count("num_segments", "Segments per rotation", 16, 3), _ROTATIONS),
            build=lambda p: helix.make_helical_ramp(**_ramp_args(p)),
            check=_check_rotations,
            smooth_angle=SMOOTH_ANGLE,
        ),
        ShapeSchema(
            ShapeKind.HELICAL_RAMP_WITH_SIDES,
            "HelicalRampWithSides",
            (
                *_HELIX_PARAMETERS,
                *_RAMP_WIDTHS,
                _count("num_segments", "Segments per rotation", 16, 3),
                _ROTATIONS,
                ParameterSpec("slope", "Slope of sides (degrees from horizontal)", "angle", 45.0),
            ),
            build=lambda p: helix.make_helical_ramp_with_sides(**_ramp_args(p), side_slope_deg=p["slope"]),
            check=_check_ramp_with_sides,
            smooth_angle=SMOOTH_ANGLE,
        ),
    )
}


def _squash(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


def get_schema(kind: ShapeKind | str) -> ShapeSchema:
    """Look up a shape by kind, kind value, or class-style label.

    Labels are matched case-insensitively and may carry a module prefix
    (``"Shapes::HelicalRamp"``), as stored by older documents.
    """

    if isinstance(kind, ShapeKind):
        return SHAPES[kind]
    name = str(kind).split("::")[-1].split(".")[-1]
    wanted = _squash(name)
    for schema in SHAPES.values():
        if wanted in (_squash(schema.kind.value), _squash(schema.label)):
            return schema
    raise InvalidArgument(f"Unknown shape '{kind}'.")


@dataclass
class LastUsedParameters:
    """Values most recently used per shape, offered as defaults next time."""

    values: Dict[ShapeKind, Dict[str, Any]] = field(default_factory=dict)

    def get(self, kind: ShapeKind | str) -> Dict[str, Any] | None:
        remembered = self.values.get(get_schema(kind).kind)
        return None if remembered is None else dict(remembered)

    def remember(self, kind: ShapeKind | str, params: Mapping[str, Any]) -> None:
        schema = get_schema(kind)
        self.values[schema.kind] = {name: params[name] for name in schema.parameter_names if name in params}

    def forget(self, kind: ShapeKind | str | None = None) -> None:
        if kind is None:
            self.values.clear()
            return
        self.values.pop(get_schema(kind).kind, None)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {kind.value: dict(params) for kind, params in self.values.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "LastUsedParameters":
        record = cls()
        for key, params in data.items():
            try:
                schema = get_schema(key)
            except InvalidArgument:
                continue
            record.values[schema.kind] = dict(params)
        return record


def default_parameters(
    kind: ShapeKind | str,
    unit_length: float = 1.0,
    last_used: LastUsedParameters | None = None,
) -> Dict[str, Any]:
    schema = get_schema(kind)
    defaults = {spec.name: spec.default_value(unit_length) for spec in schema.parameters}
    if last_used is not None:
        remembered = last_used.get(schema.kind)
        if remembered:
            defaults.update({k: v for k, v in remembered.items() if k in defaults})
    return defaults


def validate_parameters(kind: ShapeKind | str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce and check ``params`` for ``kind``; returns them in schema order."""

    schema = get_schema(kind)
    unknown = sorted(set(params) - set(schema.parameter_names) - {CLASS_KEY})
    if unknown:
        raise InvalidArgument(f"Unknown {schema.label} parameter(s): {', '.join(unknown)}.")
    missing = [name for name in schema.parameter_names if name not in params]
    if missing:
        raise InvalidArgument(f"Missing {schema.label} parameter(s): {', '.join(missing)}.")
    clean = {spec.name: spec.coerce(params[spec.name]) for spec in schema.parameters}
    if schema.check is not None:
        schema.check(clean)
    return clean


def build_shape(kind: ShapeKind | str, params: Mapping[str, Any]) -> Geometry:
    schema = get_schema(kind)
    return schema.build(validate_parameters(schema.kind, params))


def shape_attributes(kind: ShapeKind | str, params: Mapping[str, Any]) -> Dict[str, Any]:
    schema = get_schema(kind)
    attributes: Dict[str, Any] = {CLASS_KEY: schema.kind.value}
    attributes.update({name: params[name] for name in schema.parameter_names if name in params})
    return attributes


def parameters_from_attributes(attributes: Mapping[str, Any]) -> tuple[ShapeKind, Dict[str, Any]]:
    """Split a stored attribute dictionary into its shape kind and parameters."""

    data = attributes.get(ATTRIBUTE_DICTIONARY, attributes)
    if not isinstance(data, Mapping) or CLASS_KEY not in data:
        raise InvalidArgument("No parameters attached to the entity.")
    schema = get_schema(str(data[CLASS_KEY]))
    params = {key: value for key, value in data.items() if key != CLASS_KEY}
    return schema.kind, params


@dataclass
class ShapeRecord:
    kind: ShapeKind
    parameters: Dict[str, Any]
    geometry: Geometry

    @property
    def schema(self) -> ShapeSchema:
        return SHAPES[self.kind]

    @property
    def smooth_angle(self) -> float:
        return self.schema.smooth_angle

    def attributes(self) -> Dict[str, Any]:
        return shape_attributes(self.kind, self.parameters)


def create_shape(
    kind: ShapeKind | str,
    overrides: Mapping[str, Any] | None = None,
    unit_length: float = 1.0,
    last_used: LastUsedParameters | None = None,
) -> ShapeRecord:
    """Build a new shape from remembered or default values plus ``overrides``."""

    schema = get_schema(kind)
    params = default_parameters(schema.kind, unit_length, last_used)
    params.update(overrides or {})
    clean = validate_parameters(schema.kind, params)
    geometry = schema.build(clean)
    if last_used is not None:
        last_used.remember(schema.kind, clean)
    return ShapeRecord(schema.kind, clean, geometry)


def edit_shape(
    attributes: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
    last_used: LastUsedParameters | None = None,
) -> ShapeRecord:
    """Regenerate a stored shape with some of its parameters changed."""

    kind, params = parameters_from_attributes(attributes)
    params.update(overrides or {})
    clean = validate_parameters(kind, params)
    geometry = SHAPES[kind].build(clean)
    if last_used is not None:
        last_used.remember(kind, clean)
    return ShapeRecord(kind, clean, geometry)


__all__ = [
    "ATTRIBUTE_DICTIONARY",
    "Geometry",
    "LastUsedParameters",
    "ParameterSpec",
    "SHAPES",
    "ShapeKind",
    "ShapeRecord",
    "ShapeSchema",
    "build_shape",
    "create_shape",
    "default_parameters",
    "edit_shape",
    "get_schema",
    "parameters_from_attributes",
    "shape_attributes",
    "validate_parameters",
]
