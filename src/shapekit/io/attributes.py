from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from shapekit.modeling.shapes import ATTRIBUTE_DICTIONARY
from shapekit.validation import InvalidArgument

SIDECAR_SUFFIX = ".shape.json"


def sidecar_path(output: Path) -> Path:
    """``dist/torus.stl`` -> ``dist/torus.shape.json``."""

    output = Path(output)
    return output.with_name(output.stem + SIDECAR_SUFFIX)


def write_attributes(path: Path, attributes: Mapping[str, Any]) -> None:
    document = {ATTRIBUTE_DICTIONARY: dict(attributes)}
    Path(path).write_text(json.dumps(document, indent=2) + "\n")


def read_attributes(path: Path) -> Dict[str, Any]:
    try:
        document = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise InvalidArgument(f"{path} is not a shape attribute file: {exc}") from exc
    if not isinstance(document, dict) or not isinstance(document.get(ATTRIBUTE_DICTIONARY), dict):
        raise InvalidArgument(f"{path} has no '{ATTRIBUTE_DICTIONARY}' attribute dictionary.")
    return dict(document[ATTRIBUTE_DICTIONARY])
