"""Spiral ramp with sloped sides, wound left-handed."""

from __future__ import annotations

from pathlib import Path

from shapekit.io import write_obj
from shapekit.modeling import make_helical_ramp_with_sides

OUTPUT = Path("dist")
OUTPUT.mkdir(exist_ok=True)

ramp = make_helical_ramp_with_sides(
    start_radius=40.0,
    end_radius=30.0,
    ramp_start_width=12.0,
    ramp_end_width=6.0,
    pitch=15.0,
    segments_per_rotation=32,
    rotations=-2.0,
    side_slope_deg=60.0,
)
write_obj(ramp, OUTPUT / "helical_ramp_example.obj", name="ramp")
print("Saved helical_ramp_example.obj with", ramp.n_polygons, "faces")
