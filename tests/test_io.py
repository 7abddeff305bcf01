from __future__ import annotations

import json
import struct
from pathlib import Path

import pytest

from shapekit.io import read_attributes, sidecar_path, write_attributes, write_obj, write_stl
from shapekit.modeling import make_box, make_helix, shape_attributes
from shapekit.validation import InvalidArgument


def test_binary_stl_layout(tmp_path: Path):
    path = tmp_path / "box.stl"
    write_stl(make_box(1.0, 2.0, 3.0), path)
    data = path.read_bytes()
    assert data[:12] == b"shapekit STL"
    assert struct.unpack("<I", data[80:84])[0] == 12
    assert len(data) == 84 + 12 * 50


def test_ascii_stl(tmp_path: Path):
    path = tmp_path / "box.stl"
    write_stl(make_box(), path, ascii=True)
    text = path.read_text()
    assert text.startswith("solid shapekit")
    assert text.count("facet normal") == 12
    assert text.rstrip().endswith("endsolid shapekit")


def test_obj_keeps_polygons(tmp_path: Path):
    path = tmp_path / "box.obj"
    write_obj(make_box(), path, name="box")
    lines = path.read_text().splitlines()
    assert lines[0] == "o box"
    assert sum(1 for line in lines if line.startswith("v ")) == 8
    faces = [line.split()[1:] for line in lines if line.startswith("f ")]
    assert len(faces) == 6
    assert all(len(face) == 4 for face in faces)
    assert min(int(i) for face in faces for i in face) == 1


def test_obj_writes_polyline(tmp_path: Path):
    path = tmp_path / "helix.obj"
    write_obj(make_helix(1.0, 1.0, 1.0, 4, 1.0), path)
    lines = path.read_text().splitlines()
    assert sum(1 for line in lines if line.startswith("v ")) == 5
    assert lines[-1] == "l 1 2 3 4 5"


def test_obj_rejects_unknown_geometry(tmp_path: Path):
    with pytest.raises(TypeError):
        write_obj("not a mesh", tmp_path / "x.obj")


def test_sidecar_path():
    assert sidecar_path(Path("out/torus.stl")) == Path("out/torus.shape.json")


def test_attributes_round_trip(tmp_path: Path):
    attrs = shape_attributes("box", {"width": 1.0, "depth": 2.0, "height": 3.0})
    path = tmp_path / "box.shape.json"
    write_attributes(path, attrs)
    assert json.loads(path.read_text()) == {"skpp": attrs}
    assert read_attributes(path) == attrs


def test_read_attributes_rejects_other_documents(tmp_path: Path):
    path = tmp_path / "bad.shape.json"
    path.write_text("{oops")
    with pytest.raises(InvalidArgument):
        read_attributes(path)
    path.write_text(json.dumps({"other": {}}))
    with pytest.raises(InvalidArgument):
        read_attributes(path)
