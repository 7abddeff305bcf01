from __future__ import annotations

from pathlib import Path

from shapekit.mesh import Mesh, PolygonMesh, Polyline


def write_obj(geometry: PolygonMesh | Mesh | Polyline, path: Path, name: str = "shapekit") -> None:
    """Write Wavefront OBJ.

    Polygon meshes keep their n-gons, triangle meshes write triangles, and
    polylines become a single ``l`` record. OBJ indices are 1-based.
    """

    path = Path(path)
    lines = [f"o {name}"]
    if isinstance(geometry, Polyline):
        points = geometry.points
        faces: list[tuple[int, ...]] = []
    elif isinstance(geometry, PolygonMesh):
        points = geometry.vertices
        faces = [poly.indices for poly in geometry.polygons]
    elif isinstance(geometry, Mesh):
        points = geometry.vertices
        faces = [tuple(int(i) for i in tri) for tri in geometry.faces]
    else:
        raise TypeError(f"Cannot write {type(geometry).__name__} as OBJ.")

    for x, y, z in points:
        lines.append(f"v {x:.6f} {y:.6f} {z:.6f}")
    for face in faces:
        lines.append("f " + " ".join(str(i + 1) for i in face))
    if isinstance(geometry, Polyline) and geometry.n_points > 1:
        ids = list(range(1, geometry.n_points + 1))
        if geometry.closed:
            ids.append(1)
        lines.append("l " + " ".join(str(i) for i in ids))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
