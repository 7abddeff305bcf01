"""shapekit: parametric primitive shapes as polygon meshes."""

from __future__ import annotations

from .mesh import Mesh, Polygon, PolygonMesh, Polyline
from .validation import DegenerateGeometry, InvalidArgument, ShapeError

__all__ = [
    "__version__",
    "DegenerateGeometry",
    "InvalidArgument",
    "Mesh",
    "Polygon",
    "PolygonMesh",
    "Polyline",
    "ShapeError",
]

__version__ = "0.1.0"
