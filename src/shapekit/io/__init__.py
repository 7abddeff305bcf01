"""Writers for generated shapes: STL, OBJ and the attribute sidecar."""

from __future__ import annotations

from .attributes import read_attributes, sidecar_path, write_attributes
from .obj import write_obj
from .stl import write_stl

__all__ = ["read_attributes", "sidecar_path", "write_attributes", "write_obj", "write_stl"]
