from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture
def sample_suite_path():
    return Path(__file__).parent.parent / "fixtures" / "checkout.robot"


@pytest.fixture
def write_spec(tmp_path):
    """Write a filter specification JSON and return its path."""

    def _write(data: dict, name: str = "filters.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write
