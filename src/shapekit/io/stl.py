from __future__ import annotations

from pathlib import Path

import numpy as np

from shapekit.mesh import Mesh, PolygonMesh

HEADER = b"shapekit STL"
_RECORD = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("corners", "<f4", (3, 3)),
        ("attributes", "<u2"),
    ]
)


def _face_normals(corners: np.ndarray) -> np.ndarray:
    normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    # zero-area facets get a zero normal
    return np.divide(normals, lengths, out=np.zeros_like(normals), where=lengths > 0)


def write_stl(mesh: Mesh | PolygonMesh, path: Path, ascii: bool = False) -> None:
    """Write triangles to STL; polygon meshes are fan-triangulated first."""

    if isinstance(mesh, PolygonMesh):
        mesh = mesh.to_mesh()
    path = Path(path)
    corners = mesh.vertices[mesh.faces] if mesh.n_faces else np.zeros((0, 3, 3))
    normals = _face_normals(corners)

    if ascii:
        lines = ["solid shapekit"]
        for normal, tri in zip(normals, corners):
            lines.append("  facet normal {:.6e} {:.6e} {:.6e}".format(*normal))
            lines.append("    outer loop")
            lines.extend("      vertex {:.6e} {:.6e} {:.6e}".format(*corner) for corner in tri)
            lines.append("    endloop")
            lines.append("  endfacet")
        lines.append("endsolid shapekit")
        path.write_text("\n".join(lines) + "\n")
        return

    records = np.zeros(corners.shape[0], dtype=_RECORD)
    records["normal"] = normals
    records["corners"] = corners
    with path.open("wb") as handle:
        handle.write(HEADER.ljust(80, b"\0"))
        handle.write(np.array(records.shape[0], dtype="<u4").tobytes())
        handle.write(records.tobytes())
