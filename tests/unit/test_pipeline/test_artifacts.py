"""Tests for manifest and result artifacts."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from TestFiltering.pipeline.artifacts import FilterResult, load_tests, save_tests
from TestFiltering.shared.errors import ArtifactError
from TestFiltering.shared.types import Annotation, Test


class TestLoadTests:
    def test_loads_manifest(self, tmp_path: Path) -> None:
        path = tmp_path / "tests.json"
        path.write_text(
            json.dumps(
                {
                    "tests": [
                        {
                            "package": "com.example",
                            "clazz": "FooTest",
                            "method": "testA",
                            "annotations": [
                                {"name": "Severity", "value": "high"},
                                {"name": "Smoke"},
                                {"name": "Priority", "value": 1},
                            ],
                        },
                        {"clazz": "BarTest", "method": "testB"},
                    ]
                }
            )
        )
        tests = load_tests(path)
        assert tests[0] == Test(
            "com.example",
            "FooTest",
            "testA",
            (
                Annotation("Severity", "high"),
                Annotation("Smoke"),
                Annotation("Priority", "1"),
            ),
        )
        assert tests[1] == Test("", "BarTest", "testB")
        assert tests[1].fully_qualified_test_name == "BarTest#testB"

    def test_missing_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactError, match="not found"):
            load_tests(tmp_path / "nope.json")

    def test_malformed_manifest(self, tmp_path: Path) -> None:
        path = tmp_path / "tests.json"
        path.write_text(json.dumps({"tests": [{"package": "p"}]}))
        with pytest.raises(ArtifactError, match="Malformed"):
            load_tests(path)

    def test_save_then_load(self, tmp_path: Path) -> None:
        tests = [Test("p", "A", "m", (Annotation("x", "y"),))]
        path = tmp_path / "nested" / "tests.json"
        save_tests(tests, path)
        assert load_tests(path) == tests


class TestFilterResult:
    def test_json_written(self, tmp_path: Path) -> None:
        result = FilterResult(
            total_tests=3,
            tests=(Test("p", "A", "m"),),
            allowed_tests=2,
            blocked_tests=1,
        )
        path = tmp_path / "result.json"
        result.to_json(path)
        data = json.loads(path.read_text())
        assert data["total_tests"] == 3
        assert data["filtered_tests"] == 1
        assert data["tests"][0]["clazz"] == "A"
        assert FilterResult.from_json(path) == result
