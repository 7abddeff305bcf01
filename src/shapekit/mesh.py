from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from shapekit.validation import InvalidArgument

SMOOTH_ANGLE_FIELD = "__shapekit_smooth_angle__"


@dataclass
class MeshAnalysis:
    n_vertices: int
    n_faces: int
    degenerate_faces: int
    boundary_edges: int
    nonmanifold_edges: int
    invalid_vertices: int

    @property
    def is_manifold(self) -> bool:
        return self.nonmanifold_edges == 0

    @property
    def is_watertight(self) -> bool:
        return self.boundary_edges == 0 and self.is_manifold

    @property
    def has_degenerate_faces(self) -> bool:
        return self.degenerate_faces > 0

    @property
    def has_invalid_vertices(self) -> bool:
        return self.invalid_vertices > 0

    def issues(self) -> list[str]:
        issues: list[str] = []
        if self.has_invalid_vertices:
            issues.append(f"{self.invalid_vertices} invalid vertices (NaN/inf)")
        if self.has_degenerate_faces:
            issues.append(f"{self.degenerate_faces} degenerate faces")
        if self.boundary_edges > 0:
            issues.append(f"{self.boundary_edges} boundary edges (not watertight)")
        if self.nonmanifold_edges > 0:
            issues.append(f"{self.nonmanifold_edges} non-manifold edges")
        return issues


@dataclass
class Mesh:
    """Triangle soup handed to the STL writer and the mesh checks."""

    vertices: np.ndarray
    faces: np.ndarray
    analysis: MeshAnalysis | None = None

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1, 3).copy()
        self.faces = np.asarray(self.faces, dtype=int).reshape(-1, 3).copy()

    def copy(self) -> "Mesh":
        return Mesh(vertices=self.vertices.copy(), faces=self.faces.copy(), analysis=self.analysis)

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        return _bounds(self.vertices)

    def transform(self, matrix: np.ndarray, inplace: bool = True) -> "Mesh":
        from shapekit.modeling.transform import apply_transform

        transformed = apply_transform(matrix, self.vertices)
        if inplace:
            self.vertices = transformed
            return self
        mesh = self.copy()
        mesh.vertices = transformed
        return mesh


@dataclass(frozen=True)
class Polygon:
    """Vertex indices of one face plus the positions of its soft edges.

    Position ``i`` in ``soft_edges`` marks the edge running from
    ``indices[i]`` to ``indices[(i + 1) % len(indices)]``.
    """

    indices: tuple[int, ...]
    soft_edges: frozenset[int] = frozenset()

    def __len__(self) -> int:
        return len(self.indices)

    def edges(self) -> list[tuple[int, int]]:
        count = len(self.indices)
        return [(self.indices[i], self.indices[(i + 1) % count]) for i in range(count)]


class PolygonMesh:
    """Accumulating buffer of unique vertices and index polygons.

    Generators fill one of these per call and hand it over when complete;
    nothing reads it back while it is being built.
    """

    def __init__(self, tolerance: float = 1e-6) -> None:
        if tolerance <= 0:
            raise InvalidArgument("tolerance must be positive.")
        self.tolerance = float(tolerance)
        self._points: list[np.ndarray] = []
        self._lookup: dict[tuple[int, int, int], int] = {}
        self._polygons: list[Polygon] = []

    def _key(self, point: np.ndarray) -> tuple[int, int, int]:
        scaled = np.round(point / self.tolerance).astype(np.int64)
        return int(scaled[0]), int(scaled[1]), int(scaled[2])

    def add_point(self, point: Sequence[float]) -> int:
        """Add a point and return its index, reusing a coincident vertex."""

        arr = np.asarray(point, dtype=float).reshape(3)
        if not np.all(np.isfinite(arr)):
            raise InvalidArgument("Mesh points must be finite.")
        key = self._key(arr)
        index = self._lookup.get(key)
        if index is not None:
            return index
        index = len(self._points)
        self._points.append(arr.copy())
        self._lookup[key] = index
        return index

    def point_index(self, point: Sequence[float]) -> int | None:
        return self._lookup.get(self._key(np.asarray(point, dtype=float).reshape(3)))

    def add_polygon(self, *indices: int, soft_edges: Iterable[int] = ()) -> int:
        """Add a polygon of at least three existing vertex indices."""

        idx = tuple(int(i) for i in indices)
        if len(idx) < 3:
            raise InvalidArgument("A polygon needs at least three vertices.")
        count = len(self._points)
        for i in idx:
            if i < 0 or i >= count:
                raise InvalidArgument(f"Polygon index {i} is out of range for {count} vertices.")
        if len(set(idx)) != len(idx):
            raise InvalidArgument(f"Polygon {idx} repeats a vertex.")
        soft = frozenset(int(s) for s in soft_edges)
        if any(s < 0 or s >= len(idx) for s in soft):
            raise InvalidArgument("soft_edges positions must address polygon edges.")
        self._polygons.append(Polygon(idx, soft))
        return len(self._polygons) - 1

    def add_polygon_points(self, *points: Sequence[float], soft_edges: Iterable[int] = ()) -> int:
        indices = [self.add_point(p) for p in points]
        return self.add_polygon(*indices, soft_edges=soft_edges)

    @property
    def n_vertices(self) -> int:
        return len(self._points)

    @property
    def n_polygons(self) -> int:
        return len(self._polygons)

    @property
    def vertices(self) -> np.ndarray:
        if not self._points:
            return np.zeros((0, 3), dtype=float)
        return np.vstack(self._points)

    @property
    def polygons(self) -> list[Polygon]:
        return list(self._polygons)

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        return _bounds(self.vertices)

    def polygon_sizes(self) -> list[int]:
        return [len(poly) for poly in self._polygons]

    def polygon_normals(self) -> np.ndarray:
        """Unit normals by Newell's method; zero rows for degenerate polygons."""

        verts = self.vertices
        normals = np.zeros((len(self._polygons), 3), dtype=float)
        for row, poly in enumerate(self._polygons):
            pts = verts[list(poly.indices)]
            nxt = np.roll(pts, -1, axis=0)
            normal = np.array(
                [
                    np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
                    np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
                    np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
                ]
            )
            length = np.linalg.norm(normal)
            if length > 0:
                normals[row] = normal / length
        return normals

    def feature_edges(self, smooth_angle_deg: float = 0.0) -> np.ndarray:
        """Edges a face builder would draw as hard lines.

        Boundary edges are always included. Interior edges are included when
        the adjacent faces meet at more than ``smooth_angle_deg``. Soft edges
        are never included.
        """

        normals = self.polygon_normals()
        adjacency: dict[tuple[int, int], list[int]] = {}
        soft: set[tuple[int, int]] = set()
        for row, poly in enumerate(self._polygons):
            for pos, (a, b) in enumerate(poly.edges()):
                key = (a, b) if a < b else (b, a)
                adjacency.setdefault(key, []).append(row)
                if pos in poly.soft_edges:
                    soft.add(key)

        threshold = np.cos(np.deg2rad(max(float(smooth_angle_deg), 0.0)))
        edges: list[tuple[int, int]] = []
        for key, owners in adjacency.items():
            if key in soft:
                continue
            if len(owners) != 2:
                edges.append(key)
                continue
            dot = float(np.dot(normals[owners[0]], normals[owners[1]]))
            if dot < threshold - 1e-12:
                edges.append(key)
        if not edges:
            return np.zeros((0, 2), dtype=int)
        return np.asarray(sorted(edges), dtype=int)

    def to_mesh(self) -> Mesh:
        faces = triangulate_faces(poly.indices for poly in self._polygons)
        return Mesh(self.vertices, faces)

    def to_pyvista(self, smooth_angle: float = 0.0):
        import pyvista as pv

        if not self._polygons:
            poly = pv.PolyData(self.vertices, deep=True)
        else:
            faces = np.hstack([np.array([len(p), *p.indices], dtype=np.int64) for p in self._polygons])
            poly = pv.PolyData(self.vertices, faces, deep=True)
        poly.field_data[SMOOTH_ANGLE_FIELD] = np.array([float(smooth_angle)])
        return poly


@dataclass
class Polyline:
    points: np.ndarray
    closed: bool = False

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=float).reshape(-1, 3).copy()

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        return _bounds(self.points)

    def length(self) -> float:
        pts = self.points
        if self.closed and self.n_points > 1:
            pts = np.vstack([pts, pts[0]])
        return float(np.linalg.norm(np.diff(pts, axis=0), axis=1).sum())

    def to_pyvista(self):
        import pyvista as pv

        n_pts = self.n_points
        ids = list(range(n_pts))
        if self.closed:
            ids.append(0)
        cells = np.hstack(([len(ids)], ids))
        return pv.PolyData(self.points, lines=cells)


def _bounds(points: np.ndarray) -> tuple[float, float, float, float, float, float]:
    if points.shape[0] == 0:
        return (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    return (float(mins[0]), float(maxs[0]), float(mins[1]), float(maxs[1]), float(mins[2]), float(maxs[2]))


def triangulate_faces(face_list: Iterable[Sequence[int]]) -> np.ndarray:
    triangles: list[list[int]] = []
    for face in face_list:
        if len(face) < 3:
            continue
        v0 = face[0]
        for i in range(1, len(face) - 1):
            triangles.append([v0, face[i], face[i + 1]])
    if not triangles:
        return np.zeros((0, 3), dtype=int)
    return np.asarray(triangles, dtype=int)


def analyze_mesh(mesh: Mesh, area_epsilon: float = 1e-12) -> MeshAnalysis:
    """Count the defects that keep a triangle mesh from being a printable solid."""

    verts = mesh.vertices
    faces = mesh.faces
    invalid = int(np.count_nonzero(~np.isfinite(verts)))

    degenerate = 0
    boundary = 0
    nonmanifold = 0
    if faces.size > 0:
        corners = verts[faces]
        doubled_area = np.linalg.norm(np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0]), axis=1)
        degenerate = int(np.count_nonzero(doubled_area * 0.5 <= area_epsilon))

        edges = np.sort(np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]]), axis=1)
        _, uses = np.unique(edges, axis=0, return_counts=True)
        boundary = int(np.count_nonzero(uses == 1))
        nonmanifold = int(np.count_nonzero(uses > 2))

    mesh.analysis = MeshAnalysis(
        n_vertices=mesh.n_vertices,
        n_faces=mesh.n_faces,
        degenerate_faces=degenerate,
        boundary_edges=boundary,
        nonmanifold_edges=nonmanifold,
        invalid_vertices=invalid,
    )
    return mesh.analysis
