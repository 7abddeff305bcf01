from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

CONFIG_DIR = Path.home() / ".shapekit"
CONFIG_FILE = CONFIG_DIR / "shapekit.cfg"
LAST_USED_FILE = CONFIG_DIR / "last_used.json"
DEFAULT_UNITS = "millimeters"
DEFAULT_CONFIG = {
    "_comment": "Valid units: millimeters (default), centimeters, meters, inches, feet. Value is case-insensitive.",
    "units": DEFAULT_UNITS,
}


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from shapekit.cfg.

    ``default_length`` is the starting size of a new shape, expressed in the
    unit itself.
    """

    name: str
    label: str
    scale_to_mm: float
    default_length: float


UNITS: Dict[str, UnitSettings] = {
    unit.name: unit
    for unit in (
        UnitSettings("millimeters", "mm", 1.0, 10.0),
        UnitSettings("centimeters", "cm", 10.0, 10.0),
        UnitSettings("meters", "m", 1000.0, 1.0),
        UnitSettings("inches", "in", 25.4, 1.0),
        UnitSettings("feet", "ft", 304.8, 1.0),
    )
}
_SINGULAR = {"millimeter": "millimeters", "centimeter": "centimeters", "meter": "meters", "inch": "inches", "foot": "feet"}


def _read_json(path: Path) -> Dict[str, Any] | None:
    """Parsed JSON object at ``path``; None when missing, unreadable or not an object."""

    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _write_json(path: Path, data: Dict[str, Any], sort_keys: bool = False) -> bool:
    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, sort_keys=sort_keys) + "\n")
    except OSError:
        return False
    return True


def ensure_user_config() -> None:
    """Create ~/.shapekit/shapekit.cfg with the default units if it is missing."""

    if not CONFIG_FILE.exists():
        _write_json(CONFIG_FILE, DEFAULT_CONFIG)


def resolve_units(value: Any) -> UnitSettings | None:
    """Look up a unit by name, singular name or label, ignoring case."""

    key = str(value).strip().lower()
    key = _SINGULAR.get(key, key)
    if key in UNITS:
        return UNITS[key]
    for unit in UNITS.values():
        if unit.label == key:
            return unit
    return None


def get_unit_settings() -> UnitSettings:
    """Return the configured units, their conversion to millimeters and the default shape size."""

    ensure_user_config()
    config = _read_json(CONFIG_FILE) or DEFAULT_CONFIG
    return resolve_units(config.get("units", DEFAULT_UNITS)) or UNITS[DEFAULT_UNITS]


def load_last_used() -> Dict[str, Dict[str, Any]]:
    """Read remembered shape parameters; a missing or unreadable file means none."""

    data = _read_json(LAST_USED_FILE) or {}
    return {str(k): dict(v) for k, v in data.items() if isinstance(v, dict)}


def save_last_used(data: Dict[str, Dict[str, Any]]) -> None:
    _write_json(LAST_USED_FILE, data, sort_keys=True)
