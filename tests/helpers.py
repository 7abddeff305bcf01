from __future__ import annotations

import numpy as np

from shapekit.mesh import PolygonMesh, analyze_mesh


def is_watertight(mesh: PolygonMesh) -> tuple[bool, int]:
    analysis = analyze_mesh(mesh.to_mesh())
    return analysis.is_watertight, analysis.boundary_edges + analysis.nonmanifold_edges


def signed_volume(mesh: PolygonMesh) -> float:
    """Divergence-theorem volume; positive when faces wind outward."""

    tri = mesh.to_mesh()
    v = tri.vertices[tri.faces]
    return float(np.einsum("ij,ij->i", v[:, 0], np.cross(v[:, 1], v[:, 2])).sum() / 6.0)
