"""Build every registered shape at its default size and report the mesh sizes."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from shapekit._config import get_unit_settings
from shapekit.mesh import Polyline
from shapekit.modeling import SHAPES, create_shape


def build():
    units = get_unit_settings()
    return [create_shape(kind, unit_length=units.default_length) for kind in SHAPES]


if __name__ == "__main__":
    table = Table(title="shapekit defaults")
    table.add_column("Shape")
    table.add_column("Vertices", justify="right")
    table.add_column("Faces", justify="right")
    for record in build():
        geometry = record.geometry
        if isinstance(geometry, Polyline):
            table.add_row(record.schema.label, str(geometry.n_points), "-")
        else:
            table.add_row(record.schema.label, str(geometry.n_vertices), str(geometry.n_polygons))
    Console().print(table)
