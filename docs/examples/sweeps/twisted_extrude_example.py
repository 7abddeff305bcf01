"""Screw-extrude a square: a quarter turn while rising 40 units."""

from __future__ import annotations

import math
from pathlib import Path

from shapekit.io import write_obj
from shapekit.modeling import extrude_profile

OUTPUT = Path("dist")
OUTPUT.mkdir(exist_ok=True)

square = [(10.0, 10.0, 0.0), (-10.0, 10.0, 0.0), (-10.0, -10.0, 0.0), (10.0, -10.0, 0.0)]
twisted = extrude_profile(square, center=(0, 0, 0), direction=(0, 0, 40), total_angle=math.pi / 2, segments=20)
write_obj(twisted, OUTPUT / "twisted_extrude_example.obj", name="twist")
print("Saved twisted_extrude_example.obj with", twisted.n_polygons, "faces")
