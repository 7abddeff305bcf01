from __future__ import annotations

import os
from pathlib import Path

import pytest

import shapekit._config as config

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure():
    os.environ.setdefault("PYVISTA_OFF_SCREEN", "true")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep ~/.shapekit untouched: every test gets its own config directory."""

    config_dir = tmp_path / "user_config"
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_FILE", config_dir / "shapekit.cfg")
    monkeypatch.setattr(config, "LAST_USED_FILE", config_dir / "last_used.json")
    return config_dir


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT
