"""Shared fixtures."""

from pathlib import Path
from typing import Any

import pytest

from vellum.config import Config
from vellum.render import TemplateSet

from .factories import CHANNEL_TEMPLATE, INDEX_TEMPLATE


@pytest.fixture
def templates() -> TemplateSet:
    return TemplateSet({"server": INDEX_TEMPLATE, "channel": CHANNEL_TEMPLATE})


@pytest.fixture
def export_root(tmp_path: Path) -> Path:
    root = tmp_path / "export"
    root.mkdir()
    return root


@pytest.fixture
def make_config(tmp_path: Path, export_root: Path):
    def _make(output: str = "out", **overrides: Any) -> Config:
        overrides.setdefault("minify", False)
        overrides.setdefault("workers", 2)
        return Config(input_dir=export_root, output_dir=tmp_path / output, **overrides)
    return _make
