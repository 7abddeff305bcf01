from __future__ import annotations

import pathlib
import warnings
from typing import Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shapekit._config import get_unit_settings, load_last_used, save_last_used
from shapekit.io import read_attributes, sidecar_path, write_attributes, write_obj, write_stl
from shapekit.io.attributes import SIDECAR_SUFFIX
from shapekit.mesh import Polyline
from shapekit.modeling.shapes import (
    SHAPES,
    LastUsedParameters,
    ShapeRecord,
    ShapeSchema,
    create_shape,
    default_parameters,
    edit_shape,
    get_schema,
)
from shapekit.preview import PreviewBackendError, PyVistaPreviewer
from shapekit.validation import ShapeError

console = Console()
app = typer.Typer(help="Generate parametric primitive shapes and export them as meshes.")

_SET_HELP = "Parameter override as key=value; repeat for several parameters."


def _log_active_units(previewer: PyVistaPreviewer) -> None:
    scale = previewer.unit_scale_to_mm
    units = previewer.unit_name
    label = previewer.unit_label
    if abs(scale - 1.0) < 1e-9:
        console.print(f"[magenta]Units: {units} ({label}).[/magenta]")
    else:
        console.print(
            f"[magenta]Units: {units} ({label}); 1 {label} = {scale:.4g} mm.[/magenta]"
        )


def _schema(kind: str) -> ShapeSchema:
    try:
        return get_schema(kind)
    except ShapeError as exc:
        names = ", ".join(schema.kind.value for schema in SHAPES.values())
        raise typer.BadParameter(f"{exc} Choose one of: {names}.") from exc


def _parse_assignments(values: list[str] | None) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got '{item}'.")
        params[key.strip()] = value.strip()
    return params


def _next_available_path(path: pathlib.Path) -> pathlib.Path:
    """Return a non-conflicting path by appending ' (n)' before the suffix."""

    if not path.exists():
        return path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix
    n = 1
    while True:
        candidate = parent / f"{stem} ({n}){suffix}"
        if not candidate.exists():
            return candidate
        n += 1


def _default_output(record: ShapeRecord) -> pathlib.Path:
    suffix = ".obj" if isinstance(record.geometry, Polyline) else ".stl"
    return pathlib.Path(f"{record.kind.value}{suffix}")


def _generate(build: Callable[[], ShapeRecord]) -> ShapeRecord:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            record = build()
        except ShapeError as exc:
            raise typer.BadParameter(str(exc)) from exc
    for warning in caught:
        console.print(f"[yellow]{warning.message}[/yellow]")
    return record


def _write_geometry(record: ShapeRecord, output: pathlib.Path, ascii: bool) -> None:
    suffix = output.suffix.lower()
    output.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".obj":
        write_obj(record.geometry, output, name=record.kind.value)
    elif suffix == ".stl":
        if isinstance(record.geometry, Polyline):
            raise typer.BadParameter(f"{record.schema.label} produces a curve; export it as .obj instead.")
        write_stl(record.geometry, output, ascii=ascii)
    else:
        raise typer.BadParameter(f"Unsupported output format '{output.suffix}'; use .stl or .obj.")
    write_attributes(sidecar_path(output), record.attributes())


def _report(record: ShapeRecord, output: pathlib.Path, title: str) -> None:
    units = get_unit_settings()
    geometry = record.geometry
    if isinstance(geometry, Polyline):
        summary = f"{geometry.n_points} points"
    else:
        summary = f"{geometry.n_vertices} vertices, {geometry.n_polygons} faces"
    params = ", ".join(f"{key}={value:g}" for key, value in record.parameters.items())
    console.print(
        Panel(
            f"Wrote {record.schema.label} ({summary}) to [green]{output}[/green].\n"
            f"{params}\nUnits: {units.name} ({units.label}).",
            title=title,
            border_style="green",
        )
    )


@app.command()
def shapes() -> None:
    """
    List the available shapes with their parameters and current defaults.
    """

    units = get_unit_settings()
    last_used = LastUsedParameters.from_dict(load_last_used())
    table = Table(title=f"Shapes (units: {units.name})")
    table.add_column("Shape", style="cyan")
    table.add_column("Parameter")
    table.add_column("Prompt")
    table.add_column("Default", justify="right")
    for schema in SHAPES.values():
        defaults = default_parameters(schema.kind, units.default_length, last_used)
        for index, spec in enumerate(schema.parameters):
            table.add_row(
                schema.kind.value if index == 0 else "",
                spec.name,
                spec.prompt,
                f"{defaults[spec.name]:g}",
            )
    console.print(table)


@app.command()
def create(
    kind: str = typer.Argument(..., help="Shape to create, e.g. box, torus, helical_ramp."),
    params: list[str] | None = typer.Option(None, "--set", "-s", help=_SET_HELP),
    output: pathlib.Path | None = typer.Option(
        None, "--output", "-o", help="STL or OBJ file to write (defaults to <shape>.stl, curves to .obj)."
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing file."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
) -> None:
    """
    Create a shape from remembered defaults plus overrides and export it.
    """

    schema = _schema(kind)
    overrides = _parse_assignments(params)
    units = get_unit_settings()
    last_used = LastUsedParameters.from_dict(load_last_used())
    record = _generate(
        lambda: create_shape(schema.kind, overrides, unit_length=units.default_length, last_used=last_used)
    )

    target = output or _default_output(record)
    final_output = target
    if target.exists() and not overwrite:
        final_output = _next_available_path(target)
        console.print(f"[yellow]Output {target} exists; writing to {final_output} instead.[/yellow]")

    _write_geometry(record, final_output, ascii)
    save_last_used(last_used.to_dict())
    _report(record, final_output, "Shape created")


@app.command()
def edit(
    attributes: pathlib.Path = typer.Argument(..., help="Attribute file written next to an export (*.shape.json)."),
    params: list[str] | None = typer.Option(None, "--set", "-s", help=_SET_HELP),
    output: pathlib.Path | None = typer.Option(
        None, "--output", "-o", help="File to regenerate (defaults to the export next to the attribute file)."
    ),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
) -> None:
    """
    Re-read stored shape parameters, apply overrides and regenerate the geometry.
    """

    if not attributes.exists():
        raise typer.BadParameter(f"Attribute file {attributes} does not exist.")
    try:
        stored = read_attributes(attributes)
    except ShapeError as exc:
        raise typer.BadParameter(str(exc)) from exc

    overrides = _parse_assignments(params)
    last_used = LastUsedParameters.from_dict(load_last_used())
    record = _generate(lambda: edit_shape(stored, overrides, last_used=last_used))

    if output is None:
        name = attributes.name
        stem = name[: -len(SIDECAR_SUFFIX)] if name.endswith(SIDECAR_SUFFIX) else attributes.stem
        output = attributes.with_name(stem + _default_output(record).suffix)
    _write_geometry(record, output, ascii)
    if sidecar_path(output) != attributes:
        write_attributes(attributes, record.attributes())
    save_last_used(last_used.to_dict())
    _report(record, output, "Shape edited")


@app.command()
def show(
    kind: str = typer.Argument(..., help="Shape to preview."),
    params: list[str] | None = typer.Option(None, "--set", "-s", help=_SET_HELP),
    screenshot: pathlib.Path | None = typer.Option(
        None, "--screenshot", help="Optional path to save a screenshot instead of opening a window."
    ),
    show_edges: bool = typer.Option(False, "--show-edges/--hide-edges", help="Toggle polygon edge rendering."),
) -> None:
    """
    Build a shape and open an interactive PyVista preview.
    """

    schema = _schema(kind)
    overrides = _parse_assignments(params)
    units = get_unit_settings()
    last_used = LastUsedParameters.from_dict(load_last_used())
    record = _generate(
        lambda: create_shape(schema.kind, overrides, unit_length=units.default_length, last_used=last_used)
    )

    previewer = PyVistaPreviewer(console=console, unit_settings=units)
    console.rule("shapekit preview")
    _log_active_units(previewer)
    try:
        previewer.show(record, screenshot_path=screenshot, show_edges=show_edges)
    except PreviewBackendError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    app()
