"""Custom exception hierarchy for the test filtering engine."""
from __future__ import annotations

from pathlib import Path


class TestFilteringError(Exception):
    """Base exception for the test filtering engine."""

    __test__ = False


class ConfigurationError(TestFilteringError):
    """Raised when a filter rule or specification violates its invariants."""


class FilterSourceError(TestFilteringError):
    """Raised when a file-sourced filter cannot read its identifier list."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read filter file {path}: {reason}")
        self.path = path


class ArtifactError(TestFilteringError):
    """Raised when a test manifest or result artifact cannot be loaded."""


class FilterRunError(TestFilteringError):
    """Raised when the filter stage encounters an unrecoverable error."""
