"""pytest plugin applying a filter specification to collected tests.

Registered as a ``pytest11`` entry point. Activated via CLI option:

    pytest --filter-spec=filters.json tests/

Without ``--filter-spec`` the plugin is inactive.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from TestFiltering.shared.types import Annotation, Test

logger = logging.getLogger("TestFiltering.pytest")

_IGNORED_MARKERS = ("parametrize", "usefixtures")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register CLI options for specification-based filtering."""
    group = parser.getgroup("filtering", "Allowlist/blocklist test filtering")
    group.addoption(
        "--filter-spec",
        default=None,
        help="Filter specification JSON. Unset disables filtering (default).",
    )


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item],
) -> None:
    """Deselect collected items rejected by the filter specification."""
    spec_path = config.getoption("--filter-spec", default=None)
    if not spec_path:
        return

    from TestFiltering.filtering.loader import load_specification
    from TestFiltering.pipeline.apply import apply_specification
    from TestFiltering.shared.errors import TestFilteringError

    try:
        spec = load_specification(Path(spec_path))
        tests = [item_to_test(item) for item in items]
        result = apply_specification(tests, spec)
    except TestFilteringError as exc:
        raise pytest.UsageError(f"Test filtering failed: {exc}") from exc

    kept = set(result.tests)
    selected = [item for item, test in zip(items, tests) if test in kept]
    deselected = [item for item, test in zip(items, tests) if test not in kept]
    if deselected:
        config.hook.pytest_deselected(items=deselected)
    items[:] = selected

    logger.info(
        "[TEST-FILTER] Kept %d/%d tests (spec=%s).",
        len(selected), len(selected) + len(deselected), spec_path,
    )


def item_to_test(item: pytest.Item) -> Test:
    """Map a collected pytest item onto the filter engine's Test.

    Module-level functions use the module basename as their class and
    the enclosing package as their package.
    """
    module = getattr(item, "module", None)
    module_name = module.__name__ if module is not None else ""
    cls = getattr(item, "cls", None)
    if cls is not None:
        package, clazz = module_name, cls.__name__
    else:
        package, _, clazz = module_name.rpartition(".")

    annotations = tuple(
        Annotation(
            name=mark.name,
            value=str(mark.args[0]) if mark.args else None,
        )
        for mark in item.iter_markers()
        if mark.name not in _IGNORED_MARKERS
    )
    return Test(
        package=package,
        clazz=clazz,
        method=item.name,
        annotations=annotations,
    )
