"""Revolve a vase profile; the bottom point sits on the axis and becomes a pole."""

from __future__ import annotations

from pathlib import Path

from shapekit.io import write_stl
from shapekit.modeling import Z_AXIS, revolve_profile

OUTPUT = Path("dist")
OUTPUT.mkdir(exist_ok=True)

profile = [
    (0.0, 0.0, 0.0),
    (20.0, 0.0, 0.0),
    (26.0, 0.0, 15.0),
    (14.0, 0.0, 45.0),
    (18.0, 0.0, 60.0),
]
vase = revolve_profile(profile, Z_AXIS, 36)
write_stl(vase, OUTPUT / "revolve_profile_example.stl")
print("Saved revolve_profile_example.stl with", vase.n_polygons, "faces")
