from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np
from rich.console import Console

from shapekit._config import UnitSettings, get_unit_settings
from shapekit.mesh import PolygonMesh, Polyline
from shapekit.modeling.shapes import ShapeRecord


class PreviewBackendError(RuntimeError):
    """Raised when a preview backend cannot run."""


def feature_edge_lines(mesh: PolygonMesh, smooth_angle: float):
    """Hard edges of ``mesh`` as a line PolyData, or None when there are none."""

    import pyvista as pv

    edges = mesh.feature_edges(smooth_angle)
    if edges.shape[0] == 0:
        return None
    cells = np.hstack([np.full((edges.shape[0], 1), 2, dtype=np.int64), edges.astype(np.int64)]).ravel()
    return pv.PolyData(mesh.vertices, lines=cells)


def record_datasets(record: ShapeRecord) -> List[object]:
    """PyVista datasets for a shape: faces plus hard edges, or the curve."""

    geometry = record.geometry
    if isinstance(geometry, Polyline):
        return [geometry.to_pyvista()]
    datasets: List[object] = [geometry.to_pyvista(record.smooth_angle)]
    edges = feature_edge_lines(geometry, record.smooth_angle)
    if edges is not None:
        datasets.append(edges)
    return datasets


class PyVistaPreviewer:
    """Render a generated shape with PyVista."""

    def __init__(self, console: Console, unit_settings: UnitSettings | None = None):
        self.console = console
        self._pv = None
        self._unit_settings = unit_settings or get_unit_settings()

    def _ensure_backend(self):
        if self._pv is None:
            try:
                import pyvista as pv
            except ImportError as exc:  # pragma: no cover - runtime dep
                raise PreviewBackendError(
                    "PyVista is required for previewing. Install shapekit with `pip install -e .`."
                ) from exc
            pv.set_plot_theme("document")
            self._pv = pv
        return self._pv

    @property
    def unit_name(self) -> str:
        return self._unit_settings.name

    @property
    def unit_label(self) -> str:
        return self._unit_settings.label

    @property
    def unit_scale_to_mm(self) -> float:
        return self._unit_settings.scale_to_mm

    def show(
        self,
        record: ShapeRecord,
        screenshot_path: Path | None = None,
        show_edges: bool = False,
    ) -> None:
        pv = self._ensure_backend()
        datasets = record_datasets(record)
        off_screen = screenshot_path is not None
        plotter = pv.Plotter(window_size=(1280, 800), off_screen=off_screen)
        plotter.set_background("#090c10", top="#1b2333")
        plotter.add_axes(interactive=not off_screen)
        plotter.show_bounds(
            grid="back",
            location="outer",
            xtitle=f"X ({self.unit_label})",
            ytitle=f"Y ({self.unit_label})",
            ztitle=f"Z ({self.unit_label})",
        )

        surface, *overlays = datasets
        if isinstance(record.geometry, Polyline):
            plotter.add_mesh(surface, color="#fadb5f", line_width=3.0)
        else:
            plotter.add_mesh(surface, color="#6ab0ff", show_edges=show_edges, smooth_shading=True, specular=0.2)
        for overlay in overlays:
            plotter.add_mesh(overlay, color="#cdd7ff", line_width=1.0, render_lines_as_tubes=False)
        plotter.reset_camera()

        title = f"shapekit - {record.schema.label}"
        if screenshot_path is not None:
            screenshot_path.parent.mkdir(parents=True, exist_ok=True)
            plotter.show(title=title, auto_close=True, screenshot=str(screenshot_path))
            plotter.close()
            return

        plotter.show(title=title)
        plotter.close()
