"""Artifact management for the test manifest and the filter result."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from TestFiltering.shared.errors import ArtifactError
from TestFiltering.shared.types import Test

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterResult:
    """Aggregate root: the output of the filter stage."""

    total_tests: int
    tests: tuple[Test, ...]
    allowed_tests: int
    blocked_tests: int

    @property
    def filtered_tests(self) -> int:
        return len(self.tests)

    def to_json(self, path: Path) -> None:
        data = {
            "total_tests": self.total_tests,
            "filtered_tests": self.filtered_tests,
            "allowed_tests": self.allowed_tests,
            "blocked_tests": self.blocked_tests,
            "tests": [t.to_dict() for t in self.tests],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))

    @classmethod
    def from_json(cls, path: Path) -> FilterResult:
        data = json.loads(path.read_text())
        tests = tuple(Test.from_dict(t) for t in data["tests"])
        return cls(
            total_tests=data.get("total_tests", len(tests)),
            tests=tests,
            allowed_tests=data.get("allowed_tests", len(tests)),
            blocked_tests=data.get("blocked_tests", 0),
        )


def load_tests(manifest_path: Path) -> list[Test]:
    """Load the discovered tests from a JSON manifest."""
    if not manifest_path.exists():
        raise ArtifactError(f"Test manifest not found: {manifest_path}")
    try:
        raw = json.loads(manifest_path.read_text())
        tests = [Test.from_dict(t) for t in raw["tests"]]
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as exc:
        raise ArtifactError(
            f"Malformed test manifest {manifest_path}: {exc}"
        ) from exc
    logger.debug(
        "[TEST-FILTER] stage=load event=manifest_loaded path=%s tests=%d",
        manifest_path,
        len(tests),
    )
    return tests


def save_tests(tests: list[Test], manifest_path: Path) -> None:
    """Write tests as a manifest readable by load_tests."""
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(
        json.dumps({"tests": [t.to_dict() for t in tests]}, indent=2)
    )
