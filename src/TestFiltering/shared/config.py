from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FilterRunConfig:
    """Configuration for a complete filter run."""

    spec_path: Path
    tests_path: Path
    output_path: Path = Path("./results/filtered_tests.json")
