from __future__ import annotations

import logging
from pathlib import Path

from robot.api import SuiteVisitor

from TestFiltering.filtering.loader import load_specification
from TestFiltering.pipeline.apply import apply_specification
from TestFiltering.shared.types import Annotation, Test

logger = logging.getLogger(__name__)


class FilteringPreRunModifier(SuiteVisitor):
    """PreRunModifier that keeps only tests accepted by a filter specification.

    Tests map as package = parent suite full name, class = suite name,
    method = test name; tags become annotations, ``name:value`` tags
    carrying a value.

    Usage CLI::

        robot --prerunmodifier TestFiltering.execution.prerun_modifier.FilteringPreRunModifier:filters.json tests/

    Usage programmatic:
        suite.visit(FilteringPreRunModifier('filters.json'))
    """

    def __init__(self, spec_file: str) -> None:
        self._spec = load_specification(Path(spec_file))
        self._stats = {"kept": 0, "removed": 0}

    def start_suite(self, suite) -> None:  # type: ignore[override]
        if not suite.tests:
            return
        package = suite.parent.full_name if suite.parent is not None else ""
        pairs = [(t, _to_test(package, suite.name, t)) for t in suite.tests]
        kept = set(apply_specification([test for _, test in pairs], self._spec).tests)
        original = len(suite.tests)
        suite.tests = [t for t, test in pairs if test in kept]
        self._stats["kept"] += len(suite.tests)
        self._stats["removed"] += original - len(suite.tests)

    def end_suite(self, suite) -> None:  # type: ignore[override]
        suite.suites = [s for s in suite.suites if s.test_count > 0]
        if suite.parent is None:
            logger.info(
                "[TEST-FILTER] stage=prerun event=complete kept=%d removed=%d",
                self._stats["kept"],
                self._stats["removed"],
            )

    def visit_test(self, test) -> None:  # type: ignore[override]
        pass  # skip internals for performance

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)


def _to_test(package: str, suite_name: str, test) -> Test:
    annotations = []
    for tag in test.tags:
        name, sep, value = tag.partition(":")
        annotations.append(
            Annotation(name=name.strip(), value=value.strip() if sep else None)
        )
    return Test(
        package=package,
        clazz=suite_name,
        method=test.name,
        annotations=tuple(annotations),
    )
