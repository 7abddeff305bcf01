"""Torus shape demo."""

from __future__ import annotations

from pathlib import Path

from shapekit.io import sidecar_path, write_attributes, write_stl
from shapekit.modeling import create_shape

OUTPUT = Path("dist")
OUTPUT.mkdir(exist_ok=True)

record = create_shape("torus", {"small_radius": 3.5, "outer_radius": 12.5, "s1": 24, "s2": 48})
target = OUTPUT / "torus_example.stl"
write_stl(record.geometry, target)
write_attributes(sidecar_path(target), record.attributes())
print("Saved torus_example.stl with", record.geometry.n_polygons, "faces")
